import sys
from typing import Optional, TextIO


class DebugLog:
    """Verbosity-levelled trace shared by the analyzer and the interpreter.

    Level 0 is silent. Messages are written to `debug_file` (opened lazily on
    the first message) or to stderr when `debug_file` is None.
    """
    def __init__(self, debug_level: int = 0, debug_file: Optional[str] = 'debug.txt'):
        self.debug_level = debug_level
        self.debug_file = debug_file
        self.debug_fp: Optional[TextIO] = None

    def enabled(self, level: int) -> bool:
        return 0 < level <= self.debug_level

    def debug(self, level: int, msg: str):
        if not self.enabled(level):
            return
        if self.debug_file is None:
            print(msg, file=sys.stderr)
            return
        if self.debug_fp is None:
            self.debug_fp = open(self.debug_file, 'a', encoding='utf-8')
        self.debug_fp.write(msg + '\n')
        self.debug_fp.flush()

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None
