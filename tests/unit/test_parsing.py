from src.utils.parsing import extract_code_blocks, has_block, parse_fenced_json, parse_task_directive


def test_extracts_only_requested_language():
    text = "intro\n```python\nprint(1)\n```\n```pip\nrequests\n```\n```python\nprint(2)\n```"
    assert extract_code_blocks(text, "python") == ["print(1)", "print(2)"]
    assert extract_code_blocks(text, "pip") == ["requests"]
    assert len(extract_code_blocks(text)) == 3


def test_task_directive_is_parsed():
    text = 'Next step:\n```task\n{"to": "runner", "task": "run the code"}\n```'
    directive = parse_task_directive(text)
    assert directive.to == "runner"
    assert directive.task == "run the code"


def test_malformed_json_is_ignored():
    assert parse_fenced_json("```task\n{not json}\n```", "task") is None
    assert parse_task_directive('```task\n{"task": "no addressee"}\n```') is None


def test_has_block():
    assert has_block('```summary\n{"problem": "p"}\n```', "summary")
    assert not has_block("plain reply", "summary")
