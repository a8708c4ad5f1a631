from src.entrypoints.cli import print_message
from src.schemas.messages import Message


def test_print_message_labels_speaker(capsys):
    print_message(Message("reviewer", "result: APPROVED"))
    assert capsys.readouterr().out == "\n[reviewer]\nresult: APPROVED\n"
