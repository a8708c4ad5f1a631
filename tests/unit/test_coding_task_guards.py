from src.schemas.messages import Message
from src.workflows.coding_task import (
    ADMIN,
    CODER,
    PARTICIPANTS,
    REVIEWER,
    RUNNER,
    USER,
    admin_spoke_after_code,
    admin_spoke_last,
    build_workflow,
)
from src.workflows.graph import START


def msg(speaker, content="..."):
    return Message(speaker=speaker, content=content)


def test_workflow_declares_all_participants():
    graph = build_workflow()
    assert graph.participants == frozenset(PARTICIPANTS)
    assert len(graph.edges) == 7


def test_admin_after_coder_offers_all_in_priority_order():
    graph = build_workflow()
    transcript = [msg(ADMIN), msg(CODER, "code..."), msg(ADMIN)]
    assert graph.eligible_targets(ADMIN, transcript) == [CODER, RUNNER, USER]


def test_coder_always_hands_to_reviewer():
    graph = build_workflow()
    transcript = [msg(USER), msg(ADMIN), msg(CODER, "code...")]
    assert graph.eligible_targets(CODER, transcript) == [REVIEWER]


def test_runner_needs_prior_coder_message():
    graph = build_workflow()
    targets = graph.eligible_targets(ADMIN, [msg(ADMIN)])
    assert CODER in targets
    assert USER in targets
    assert RUNNER not in targets


def test_admin_edges_reject_when_admin_did_not_speak_last():
    graph = build_workflow()
    for last in (USER, CODER, REVIEWER, RUNNER):
        transcript = [msg(ADMIN), msg(CODER), msg(last)]
        assert graph.eligible_targets(ADMIN, transcript) == []


def test_unguarded_edges_back_to_admin():
    graph = build_workflow()
    for source in (RUNNER, REVIEWER, USER):
        assert graph.eligible_targets(source, [msg(source)]) == [ADMIN]


def test_nothing_leaves_start():
    assert build_workflow().eligible_targets(START, []) == []


def test_guards_ignore_empty_transcript():
    roster = {ADMIN: ADMIN, CODER: CODER}
    assert admin_spoke_last([], roster) is False
    assert admin_spoke_after_code([], roster) is False


def test_renamed_roster_is_honoured():
    graph = build_workflow({ADMIN: "manager"})
    transcript = [msg("manager"), msg(CODER), msg("manager")]
    assert graph.eligible_targets("manager", transcript) == [CODER, RUNNER, USER]
