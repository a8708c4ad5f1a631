from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from src.agents.base import Agent
from src.agents.user_proxy import TERMINATE
from src.memory.transcript import Transcript
from src.schemas.messages import AgentState, Message, Task
from src.utils.errors import ConfigurationError, GenerationError
from src.workflows.graph import START, WorkflowGraph
from src.workflows.selection import SpeakerSelector, first_eligible

logger = logging.getLogger(__name__)

SYSTEM = "system"

REASON_SIGNAL = "termination signal"
REASON_MAX_ROUNDS = "max rounds reached"
REASON_NO_SPEAKER = "no eligible speaker"
REASON_CANCELLED = "cancelled"


class TurnPhase(str, Enum):
    AWAITING_SPEAKER = "awaiting_speaker"
    SPEAKER_GENERATING = "speaker_generating"
    MESSAGE_ACCEPTED = "message_accepted"
    TERMINATED = "terminated"


@dataclass
class Role:
    name: str
    agent: Agent


@dataclass
class ConversationState:
    transcript: Transcript
    max_rounds: int
    round: int = 0
    terminated: bool = False
    termination_reason: Optional[str] = None
    phase: TurnPhase = TurnPhase.AWAITING_SPEAKER

    def terminate(self, reason: str) -> None:
        self.terminated = True
        self.termination_reason = reason
        self.phase = TurnPhase.TERMINATED


@dataclass
class RunResult:
    messages: Tuple[Message, ...]
    rounds: int
    termination_reason: str
    failures: List[str] = field(default_factory=list)

    @property
    def outputs(self) -> Dict[str, str]:
        """Latest content per speaker."""
        latest: Dict[str, str] = {}
        for message in self.messages:
            latest[message.speaker] = message.content
        return latest


class Orchestrator:
    """Drives one group chat: route, pick a speaker, generate, append, repeat.

    Only this loop writes to the transcript. Guards and agents see tuple
    snapshots taken before each turn.
    """

    def __init__(
        self,
        roles: Iterable[Role],
        graph: WorkflowGraph,
        max_rounds: int = 30,
        selector: SpeakerSelector = first_eligible,
        fallback_speaker: str | None = None,
        user_proxy: str = "user",
        termination_signal: str = TERMINATE,
        reply_timeout: float | None = None,
        max_retries: int = 1,
        transcript: Transcript | None = None,
        on_message: Callable[[Message], None] | None = None,
    ) -> None:
        self.roles: Dict[str, Role] = {role.name: role for role in roles}
        self.graph = graph
        self.max_rounds = max_rounds
        self.selector = selector
        self.fallback_speaker = fallback_speaker
        self.user_proxy = user_proxy
        self.termination_signal = termination_signal
        self.reply_timeout = reply_timeout
        self.max_retries = max(0, max_retries)
        self.transcript = transcript or Transcript()
        self.on_message = on_message
        self._pool: ThreadPoolExecutor | None = None
        self._stale: Future | None = None
        self._validate()

    def _validate(self) -> None:
        if self.max_rounds < 1:
            raise ConfigurationError("max_rounds must be at least 1")
        missing = sorted(self.graph.participants - set(self.roles))
        if missing:
            raise ConfigurationError(f"No agent registered for participants: {', '.join(missing)}")
        extra = sorted(set(self.roles) - self.graph.participants)
        if extra:
            raise ConfigurationError(f"Agents not declared in the workflow graph: {', '.join(extra)}")
        if self.fallback_speaker is not None and self.fallback_speaker not in self.roles:
            raise ConfigurationError(f"Fallback speaker '{self.fallback_speaker}' is not a participant")

    def run(
        self,
        task: Task,
        initiator: str | None = "user",
        cancel_event: threading.Event | None = None,
    ) -> RunResult:
        seed = [Message(speaker=initiator, content=task.description)] if initiator else []
        self.transcript.reset(seed)
        state = ConversationState(transcript=self.transcript, max_rounds=self.max_rounds, round=len(seed))
        failures: List[str] = []
        for message in seed:
            self._emit(message)

        current = initiator or START
        if state.round >= state.max_rounds:
            state.terminate(REASON_MAX_ROUNDS)

        try:
            self._loop(task, state, current, failures, cancel_event)
        finally:
            self._release_worker()

        logger.info("Conversation ended after %d rounds: %s", state.round, state.termination_reason)
        return RunResult(
            messages=self.transcript.snapshot(),
            rounds=state.round,
            termination_reason=state.termination_reason or REASON_NO_SPEAKER,
            failures=failures,
        )

    def _loop(
        self,
        task: Task,
        state: ConversationState,
        current: str,
        failures: List[str],
        cancel_event: threading.Event | None,
    ) -> None:
        while not state.terminated:
            if cancel_event is not None and cancel_event.is_set():
                state.terminate(REASON_CANCELLED)
                break

            state.phase = TurnPhase.AWAITING_SPEAKER
            snapshot = self.transcript.snapshot()
            speaker = self._next_speaker(current, snapshot)
            if speaker is None:
                state.terminate(REASON_NO_SPEAKER)
                break

            state.phase = TurnPhase.SPEAKER_GENERATING
            message, error = self._generate(speaker, task, snapshot, state)
            if message is None:
                failures.append(error)
                message = Message(
                    speaker=SYSTEM,
                    content=f"{speaker} failed to reply: {error}",
                    metadata={"failed_speaker": speaker, "error": error},
                )
                logger.error("Turn %d: %s", state.round + 1, message.content)

            self.transcript.append(message)
            state.round += 1
            state.phase = TurnPhase.MESSAGE_ACCEPTED
            logger.info("Round %d/%d: %s spoke", state.round, state.max_rounds, message.speaker)
            self._emit(message)
            current = message.speaker

            if self._is_termination(message):
                state.terminate(REASON_SIGNAL)
            elif state.round >= state.max_rounds:
                state.terminate(REASON_MAX_ROUNDS)

    def _next_speaker(self, current: str, snapshot: Sequence[Message]) -> str | None:
        candidates = self.graph.eligible_targets(current, snapshot)
        if not candidates:
            if self.fallback_speaker is not None:
                logger.info("No transition from %s; falling back to %s", current, self.fallback_speaker)
            return self.fallback_speaker
        picked = self.selector(candidates, snapshot)
        if picked not in candidates:
            logger.warning("Selector returned %r outside %s; using %s", picked, candidates, candidates[0])
            return candidates[0]
        return picked

    def _generate(
        self,
        speaker: str,
        task: Task,
        snapshot: Tuple[Message, ...],
        state: ConversationState,
    ) -> Tuple[Message | None, str]:
        agent = self.roles[speaker].agent
        agent_state = AgentState(
            task=task,
            memory=snapshot,
            round_idx=state.round + 1,
            max_rounds=state.max_rounds,
        )
        error = ""
        attempts = self.max_retries + 1
        for attempt in range(1, attempts + 1):
            if not self._wait_for_stale():
                error = error or "previous reply is still running"
                logger.warning("%s: earlier reply still running, giving up the turn", speaker)
                break
            try:
                message = self._call(speaker, agent, agent_state)
            except GenerationError as exc:
                error = str(exc)
            except FutureTimeoutError:
                error = f"no reply within {self.reply_timeout:g}s"
            else:
                if message.speaker != speaker:
                    message = replace(message, speaker=speaker)
                return message, ""
            logger.warning("%s attempt %d/%d failed: %s", speaker, attempt, attempts, error)
        return None, error

    def _call(self, speaker: str, agent: Agent, agent_state: AgentState) -> Message:
        # the human proxy is never timed out
        if self.reply_timeout is None or speaker == self.user_proxy:
            return agent.step(agent_state)
        if self._pool is None:
            self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="reply")
        future = self._pool.submit(agent.step, agent_state)
        try:
            return future.result(timeout=self.reply_timeout)
        except FutureTimeoutError:
            self._stale = future
            raise

    def _wait_for_stale(self) -> bool:
        """A timed-out reply keeps running; no new generation starts until it finishes."""
        if self._stale is None:
            return True
        wait_futures([self._stale], timeout=self.reply_timeout)
        if not self._stale.done():
            return False
        self._stale = None
        return True

    def _release_worker(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=False)
            self._pool = None

    def _is_termination(self, message: Message) -> bool:
        return message.speaker == self.user_proxy and message.content.strip() == self.termination_signal

    def _emit(self, message: Message) -> None:
        if self.on_message is not None:
            self.on_message(message)
