"""PL/SQL to Python conversion: participants, transitions and the run wiring."""

from __future__ import annotations

import logging
import threading
import uuid
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from src.agents.assistant import AssistantAgent
from src.agents.runner import RunnerAgent
from src.agents.user_proxy import UserProxyAgent
from src.schemas.messages import Message, Task
from src.tools.code_executor import CodeExecutorTool
from src.utils.errors import ConfigurationError
from src.utils.fixtures import FixtureLoader
from src.utils.llm_clients import LLMClient, build_llm_client
from src.utils.settings import AppConfig, LLMConfig
from src.workflows.graph import Edge, WorkflowGraph, build_graph
from src.workflows.orchestrator import Orchestrator, Role, RunResult
from src.workflows.selection import AddresseeSelector, GroupAdminSelector, SpeakerSelector, first_eligible

logger = logging.getLogger(__name__)

ADMIN = "admin"
CODER = "coder"
REVIEWER = "reviewer"
RUNNER = "runner"
USER = "user"

PARTICIPANTS = (ADMIN, CODER, REVIEWER, RUNNER, USER)

LLMFactory = Callable[[LLMConfig, Optional[float]], LLMClient]


def admin_spoke_last(transcript: Sequence[Message], roster: Mapping[str, str]) -> bool:
    return bool(transcript) and transcript[-1].speaker == roster[ADMIN]


def admin_spoke_after_code(transcript: Sequence[Message], roster: Mapping[str, str]) -> bool:
    return admin_spoke_last(transcript, roster) and any(m.speaker == roster[CODER] for m in transcript)


def build_workflow(roster: Mapping[str, str] | None = None) -> WorkflowGraph:
    """Declaration order sets admin's priority: coder, then runner, then user."""
    names = dict(zip(PARTICIPANTS, PARTICIPANTS))
    names.update(roster or {})
    edges = [
        Edge(names[ADMIN], names[CODER], admin_spoke_last),
        Edge(names[CODER], names[REVIEWER]),
        Edge(names[REVIEWER], names[ADMIN]),
        Edge(names[ADMIN], names[RUNNER], admin_spoke_after_code),
        Edge(names[RUNNER], names[ADMIN]),
        Edge(names[ADMIN], names[USER], admin_spoke_last),
        Edge(names[USER], names[ADMIN]),
    ]
    return build_graph(names.values(), edges, roster=names)


def build_request(template: str, fixtures: Mapping[str, str]) -> str:
    try:
        return template.format(**fixtures)
    except KeyError as exc:
        raise ConfigurationError(f"Request template needs fixture {exc}") from exc


def build_roles(
    config: AppConfig,
    llm_factory: LLMFactory = build_llm_client,
    input_fn: Callable[[str], str] = input,
) -> List[Role]:
    roles: List[Role] = []
    for name, agent_config in config.agents.items():
        if agent_config.backend == "llm":
            if not agent_config.prompt_path:
                raise ConfigurationError(f"Agent '{name}' needs a prompt_path")
            temperature = (
                agent_config.temperature if agent_config.temperature is not None else config.llm.temperature
            )
            agent = AssistantAgent(
                name=name,
                prompt_path=config.resolve(agent_config.prompt_path),
                llm_client=llm_factory(config.llm, temperature),
                temperature=temperature,
            )
        elif agent_config.backend == "runner":
            executor = CodeExecutorTool(
                work_dir=config.resolve(config.executor.work_dir),
                timeout_seconds=config.executor.timeout_seconds,
                allow_installs=config.executor.allow_installs,
            )
            agent = RunnerAgent(code_executor=executor, name=name, coder_name=CODER)
            if agent_config.default_reply:
                agent.default_reply = agent_config.default_reply
        else:
            agent = UserProxyAgent(
                name=name,
                default_reply=agent_config.default_reply or config.workflow.termination_signal,
                human_input_mode=agent_config.human_input_mode,
                input_fn=input_fn,
            )
        roles.append(Role(name=name, agent=agent))
    return roles


def build_selector(config: AppConfig, llm_factory: LLMFactory = build_llm_client) -> SpeakerSelector:
    mode = config.workflow.speaker_selection
    if mode == "addressee":
        return AddresseeSelector(user_name=USER)
    if mode == "group_admin":
        if not config.workflow.selector_prompt_path:
            raise ConfigurationError("group_admin selection needs workflow.selector_prompt_path")
        prompt = config.resolve(config.workflow.selector_prompt_path).read_text(encoding="utf-8")
        return GroupAdminSelector(llm_factory(config.llm, 0.0), prompt)
    return first_eligible


def build_orchestrator(
    config: AppConfig,
    llm_factory: LLMFactory = build_llm_client,
    on_message: Callable[[Message], None] | None = None,
    input_fn: Callable[[str], str] = input,
) -> Orchestrator:
    workflow = config.workflow
    return Orchestrator(
        roles=build_roles(config, llm_factory, input_fn),
        graph=build_workflow(),
        max_rounds=workflow.max_rounds,
        selector=build_selector(config, llm_factory),
        fallback_speaker=workflow.fallback_speaker,
        user_proxy=USER,
        termination_signal=workflow.termination_signal,
        reply_timeout=workflow.reply_timeout_seconds,
        max_retries=workflow.max_retries,
        on_message=on_message,
    )


def load_request(config: AppConfig) -> Task:
    loader = FixtureLoader(config.resolve(config.fixtures.directory), config.fixtures.files)
    fixtures: Dict[str, str] = loader.load_all()
    template_path = config.resolve(config.workflow.request_template)
    if not template_path.is_file():
        raise ConfigurationError(f"Missing request template: {template_path}")
    description = build_request(template_path.read_text(encoding="utf-8"), fixtures)
    return Task(id=str(uuid.uuid4()), description=description, context={"fixtures": sorted(fixtures)})


def run_conversion(
    config: AppConfig,
    llm_factory: LLMFactory = build_llm_client,
    on_message: Callable[[Message], None] | None = None,
    cancel_event: threading.Event | None = None,
    input_fn: Callable[[str], str] = input,
) -> RunResult:
    task = load_request(config)
    orchestrator = build_orchestrator(config, llm_factory, on_message, input_fn)
    logger.info("Starting conversion run %s with %d participants", task.id, len(orchestrator.roles))
    return orchestrator.run(task, initiator=config.workflow.initiator, cancel_event=cancel_event)
