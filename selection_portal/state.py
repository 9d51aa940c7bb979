# in-memory selection registry
import logging
import math
from threading import Lock
from typing import Callable, Dict, List, Optional, Union

from .config import MIN_NAME_LENGTH, OPTION_NAMES
from .errors import (
    EMPTY_NAME,
    TOO_SHORT,
    AlreadySelected,
    NameValidationError,
    NoActiveSession,
    OptionFull,
    SnapshotError,
    UnknownOption,
)
from .models import (
    OptionCount,
    OptionId,
    OptionStatus,
    OptionSummary,
    RegistryConfig,
    RegistrySnapshot,
    SelectionRecord,
    SelectionResult,
    SessionResult,
    Summary,
    Tier,
)

logger = logging.getLogger(__name__)

SelectionHandler = Callable[[SelectionResult], None]


def normalize_name(name: str) -> str:
    """
    Trim a raw participant name and validate it.
    Raises NameValidationError when the trimmed name is empty or too short.
    """
    name = (name or "").strip()
    if not name:
        raise NameValidationError(EMPTY_NAME)
    if len(name) < MIN_NAME_LENGTH:
        raise NameValidationError(TOO_SHORT)
    return name


def option_name(option_id: OptionId) -> str:
    return OPTION_NAMES[option_id.value]


def resolve_option(option_id: Union[str, OptionId]) -> OptionId:
    try:
        return OptionId(option_id)
    except ValueError:
        raise UnknownOption(str(option_id)) from None


def compute_tier(count: int, config: RegistryConfig) -> Tier:
    if count >= config.capacity:
        return Tier.FULL
    if count >= config.few_slots_at:
        return Tier.FEW_SLOTS
    return Tier.AVAILABLE


def compute_percentage(count: int, capacity: int) -> int:
    # half-up, so 2.5% shows as 3%
    return int(math.floor(100 * count / capacity + 0.5))


class SelectionRegistry:
    """
    Authoritative state for one portal:
    counts[option_id] = number of participants who picked it
    selections[participant] = option_id, written once and never changed

    select_option is the only live mutation; it runs the existence check,
    the capacity check and the write under one lock.
    """

    def __init__(self, config: Optional[RegistryConfig] = None):
        self.config = config or RegistryConfig()
        self.current_participant: Optional[str] = None
        self._counts: Dict[OptionId, int] = {opt: 0 for opt in OptionId}
        self._selections: Dict[str, OptionId] = {}
        self._handlers: List[SelectionHandler] = []
        self._lock = Lock()

    def subscribe(self, handler: SelectionHandler) -> None:
        """
        Register a callback run after every successful selection.
        Handlers run outside the lock; their failures are logged, never
        propagated to the participant whose selection already went through.
        """
        self._handlers.append(handler)

    def begin_session(self, name: str) -> SessionResult:
        participant = normalize_name(name)
        with self._lock:
            self.current_participant = participant
            prior = self._selections.get(participant)

        logger.info("session started for %s (already_selected=%s)", participant, prior is not None)
        if prior is None:
            return SessionResult(participant=participant, already_selected=False)
        return SessionResult(
            participant=participant,
            already_selected=True,
            option_id=prior,
            option_name=option_name(prior),
        )

    def selection_of(self, participant: str) -> Optional[OptionId]:
        with self._lock:
            return self._selections.get(participant)

    def select_option(
        self, option_id: Union[str, OptionId], participant: Optional[str] = None
    ) -> SelectionResult:
        """
        Record the participant's one and only choice.
        Defaults to the current session's participant.
        """
        if participant is not None:
            participant = normalize_name(participant)
        with self._lock:
            who = participant if participant is not None else self.current_participant
            if not who:
                raise NoActiveSession()
            opt = resolve_option(option_id)

            prior = self._selections.get(who)
            if prior is not None:
                logger.info("rejected %s for %s: already selected %s", opt.value, who, prior.value)
                raise AlreadySelected(who, prior.value)

            if self._counts[opt] >= self.config.capacity:
                logger.info("rejected %s for %s: option full", opt.value, who)
                raise OptionFull(opt.value)

            self._counts[opt] += 1
            self._selections[who] = opt
            result = SelectionResult(
                participant=who,
                option_id=opt,
                option_name=option_name(opt),
                count=self._counts[opt],
            )

        logger.info("%s selected %s (%d/%d)", who, opt.value, result.count, self.config.capacity)
        self._notify(result)
        return result

    def _notify(self, result: SelectionResult) -> None:
        for handler in list(self._handlers):
            try:
                handler(result)
            except Exception:
                logger.exception("selection handler %r failed", handler)

    def get_option_status(self, option_id: Union[str, OptionId]) -> OptionStatus:
        opt = resolve_option(option_id)
        with self._lock:
            count = self._counts[opt]
        return OptionStatus(
            option_id=opt,
            name=option_name(opt),
            count=count,
            capacity=self.config.capacity,
            tier=compute_tier(count, self.config),
        )

    def all_options_full(self) -> bool:
        with self._lock:
            return all(c >= self.config.capacity for c in self._counts.values())

    def get_summary(self) -> Summary:
        capacity = self.config.capacity
        with self._lock:
            counts = dict(self._counts)
            distinct = len(self._selections)

        total = sum(counts.values())
        per_option = [
            OptionSummary(
                option_id=opt,
                count=counts[opt],
                percentage=compute_percentage(counts[opt], capacity),
            )
            for opt in OptionId
        ]
        return Summary(
            total_selections=total,
            available_slots=len(counts) * capacity - total,
            distinct_participants=distinct,
            per_option=per_option,
            all_full=all(c >= capacity for c in counts.values()),
        )

    def export_snapshot(self) -> RegistrySnapshot:
        with self._lock:
            options = [OptionCount(id=opt, count=c) for opt, c in self._counts.items()]
            selections = [
                SelectionRecord(participant=p, option_id=opt)
                for p, opt in self._selections.items()
            ]
        return RegistrySnapshot(options=options, selections=selections)

    def load_snapshot(self, snapshot: RegistrySnapshot) -> None:
        """
        Replace the whole state with recorded history.
        Skips the live guards but rejects history that breaks the invariants;
        on rejection nothing changes.
        """
        declared: Dict[OptionId, int] = {}
        for entry in snapshot.options:
            if entry.id in declared:
                raise SnapshotError(f"duplicate option entry: {entry.id.value}")
            declared[entry.id] = entry.count

        counts: Dict[OptionId, int] = {opt: 0 for opt in OptionId}
        selections: Dict[str, OptionId] = {}
        for rec in snapshot.selections:
            try:
                participant = normalize_name(rec.participant)
            except NameValidationError as exc:
                raise SnapshotError(f"invalid participant name: {rec.participant!r}") from exc
            if participant in selections:
                raise SnapshotError(f"participant recorded twice: {participant}")
            selections[participant] = rec.option_id
            counts[rec.option_id] += 1

        for opt in OptionId:
            if declared.get(opt, 0) != counts[opt]:
                raise SnapshotError(
                    f"{opt.value}: declared count {declared.get(opt, 0)} "
                    f"does not match {counts[opt]} recorded selections"
                )
            if counts[opt] > self.config.capacity:
                raise SnapshotError(f"{opt.value} exceeds capacity {self.config.capacity}")

        with self._lock:
            self._counts = counts
            self._selections = selections

        logger.warning("registry replaced from snapshot: %d selections", len(selections))
