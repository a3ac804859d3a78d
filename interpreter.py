from dataclasses import dataclass
from typing_extensions import *

from automaton import (
    Configuration,
    ConfigurationSet,
    Definition,
    Stack,
    State,
    Symbol,
    Word,
    apply_transition,
    is_accepting,
    transition_matches,
)

DEFAULT_MAX_TICKS = 2000

TraceSink = Callable[[int, ConfigurationSet], None]


class TickLimitError(Exception):
    """
    Raised when no accepting configuration shows up within the tick budget.
    This does not mean the word is rejected, only that acceptance could not
    be decided.
    """

    def __init__(self, ticks: int, limit: int):
        self.ticks = ticks
        self.limit = limit
        super().__init__(
            f"Reached tick limit {limit} after {ticks} ticks, couldn't accept word"
        )


@dataclass(frozen=True)
class InterpreterConfig:
    max_ticks: int = DEFAULT_MAX_TICKS  # non-positive means unbounded
    trace: Optional[TraceSink] = None

    @classmethod
    def from_env(
        cls, env: Mapping[str, str], trace: Optional[TraceSink] = None
    ) -> "InterpreterConfig":
        """Build a config from MAX_TICKS and DEBUG style variables."""
        max_ticks = DEFAULT_MAX_TICKS
        raw = env.get("MAX_TICKS", "").strip()
        if raw:
            try:
                max_ticks = int(raw)
            except ValueError:
                raise ValueError(f"MAX_TICKS must be an integer, got {raw!r}") from None

        return cls(max_ticks=max_ticks, trace=trace if env.get("DEBUG") else None)


class Interpreter:
    """
    Breadth-first simulator for a magazine automaton.

    Every tick expands all configurations of the frontier at once, so the
    frontier after n ticks holds every configuration reachable in exactly n
    steps (up to deduplication).
    """

    def __init__(self, definition: Definition, config: Optional[InterpreterConfig] = None):
        config = config or InterpreterConfig()
        self.definition = definition
        self.max_ticks = config.max_ticks
        self.trace = config.trace
        self.accepted: Optional[Configuration] = None
        self._transitions = definition.transitions_by_state()
        self.reset()

    def set_max_ticks(self, max_ticks: int):
        self.max_ticks = max_ticks

    def reset(self, word: Sequence[Symbol] = ()):
        self.ticks = 0
        self.frontier = ConfigurationSet(
            [
                Configuration(
                    state=self.definition.initial_state,
                    word=tuple(word),
                    stack=(self.definition.initial_stack_symbol,),
                )
            ]
        )

    def tick(self):
        next_frontier = ConfigurationSet()
        for config in self.frontier:
            for transition in self._transitions.get(config.state, ()):
                if transition_matches(config, transition):
                    next_frontier.add(apply_transition(config, transition))

        self.frontier = next_frontier
        self.ticks += 1

        if self.trace is not None:
            self.trace(self.ticks, self.frontier)

    def accepting_configuration(self) -> Optional[Configuration]:
        for config in self.frontier:
            if is_accepting(config, self.definition):
                return config
        return None

    def accepts_word(self, word: Sequence[Symbol]) -> bool:
        """
        Whether some run of the automaton accepts word.

        Returns False once no configuration is left to expand. Raises
        TickLimitError when the budget runs out first.
        """
        self.reset(word)
        self.accepted = None

        while True:
            accepted = self.accepting_configuration()
            if accepted is not None:
                self.accepted = accepted
                return True

            if not self.frontier:
                return False

            if self.max_ticks > 0 and self.ticks >= self.max_ticks:
                raise TickLimitError(self.ticks, self.max_ticks)

            self.tick()

    def derivation(self, word: Sequence[Symbol]) -> Optional[List[Tuple[State, Word, Stack]]]:
        """
        Accepting derivation of word as (state, remaining word, stack)
        triples, or None when the word is rejected.
        """
        if not self.accepts_word(word):
            return None
        return [c.key for c in self.accepted.derivation()]
