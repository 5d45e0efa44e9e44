from pathlib import Path

from quill import run_program

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_6(capsys):
    with open(EXAMPLES / 'program_6.quill', 'r', encoding='utf-8') as f:
        source = f.read()
    result = run_program(source)
    out = capsys.readouterr().out.strip()
    assert result.datum == 0
    assert out == '3.75\n1.88'
