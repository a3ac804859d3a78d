from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing_extensions import *

from graphviz import Digraph

State = str
Symbol = str
StackSymbol = str
Word = Tuple[Symbol, ...]
Stack = Tuple[StackSymbol, ...]


class Epsilon(Enum):
    """Input label of a transition that reads nothing."""

    EPSILON = "ε"

    def __str__(self):
        return self.value


EPSILON = Epsilon.EPSILON

# A transition reads nothing, one symbol, or a whole word at once
InputSymbol = Union[Epsilon, Symbol, Word]


@dataclass(frozen=True)
class Transition:
    """
    One row of the transition table.

    input_stack_symbols are compared against the top of the stack and
    output_stack_symbols replace them, both written bottom to top so the
    last element is the topmost one.
    """

    from_state: State
    input_symbol: InputSymbol
    input_stack_symbols: Stack
    to_state: State
    output_stack_symbols: Stack

    @property
    def consumed(self) -> Word:
        """The input symbols this transition reads, in order."""
        if self.input_symbol is EPSILON:
            return ()
        if isinstance(self.input_symbol, tuple):
            return self.input_symbol
        return (self.input_symbol,)

    def __str__(self):
        if isinstance(self.input_symbol, tuple):
            inp = "".join(self.input_symbol)
        else:
            inp = str(self.input_symbol)
        pop = "".join(self.input_stack_symbols) or "ε"
        push = "".join(self.output_stack_symbols) or "ε"
        return f"{self.from_state}, {inp}, {pop} → {self.to_state}, {push}"


@dataclass(frozen=True)
class Definition:
    """Static description of a magazine automaton."""

    states: FrozenSet[State]
    alphabet_symbols: FrozenSet[Symbol]
    stack_symbols: FrozenSet[StackSymbol]
    initial_state: State
    initial_stack_symbol: StackSymbol
    accepted_states: FrozenSet[State] = field(default_factory=frozenset)
    accept_through_empty_stack: bool = False
    transitions: Tuple[Transition, ...] = ()

    def __post_init__(self):
        """Validate the definition against its declared sets."""
        if self.initial_state not in self.states:
            raise ValueError(
                f"Initial state {self.initial_state!r} is not one of the states"
            )

        if self.initial_stack_symbol not in self.stack_symbols:
            raise ValueError(
                f"Initial stack symbol {self.initial_stack_symbol!r} "
                "is not one of the stack symbols"
            )

        unknown = set(self.accepted_states) - set(self.states)
        if unknown:
            raise ValueError(
                f"Accepted states {sorted(unknown)} are not among the states"
            )

    @property
    def acceptance_mode(self) -> str:
        return "empty_stack" if self.accept_through_empty_stack else "final_state"

    def transitions_by_state(self) -> Dict[State, List[Transition]]:
        """Index outgoing transitions by source state, keeping their order."""
        result = defaultdict(list)
        for transition in self.transitions:
            result[transition.from_state].append(transition)
        return dict(result)

    def __str__(self):
        lines = [
            f"States:          {', '.join(sorted(self.states))}",
            f"Alphabet:        {', '.join(sorted(self.alphabet_symbols))}",
            f"Stack symbols:   {', '.join(sorted(self.stack_symbols))}",
            f"Initial state:   {self.initial_state}",
            f"Initial stack:   {self.initial_stack_symbol}",
            f"Accepted states: {', '.join(sorted(self.accepted_states)) or '-'}",
            f"Acceptance:      {self.acceptance_mode}",
            "Transitions:",
        ]
        lines.extend(f"  {t}" for t in self.transitions)
        return "\n".join(lines)

    # -------------------------------------------------------------------------
    # Visualization
    # -------------------------------------------------------------------------

    def to_graphviz(self, filename: Optional[str] = None, view: bool = False) -> Digraph:
        """
        Generate a Graphviz visualization for this automaton.
        The graph is only rendered to disk when a filename is given.
        """
        title = f"PDA ({self.acceptance_mode.replace('_', ' ')})"

        dot = Digraph(
            name="PDA",
            format="png",
            graph_attr={
                "rankdir": "LR",
                "splines": "true",
                "nodesep": "0.8",
                "ranksep": "1.2",
                "label": title,
                "labelloc": "t",
                "fontsize": "14",
                "fontname": "Arial",
                "bgcolor": "white",
                "pad": "0.5",
                "dpi": "300",
            },
            node_attr={
                "shape": "circle",
                "fontsize": "14",
                "fontname": "Arial",
                "width": "0.6",
                "height": "0.6",
                "fixedsize": "true",
                "style": "filled",
                "fillcolor": "lightblue",
                "color": "black",
                "penwidth": "2",
            },
            edge_attr={
                "fontsize": "12",
                "fontname": "Arial",
                "arrowsize": "0.8",
                "penwidth": "1.5",
                "color": "black",
            },
        )

        dot.node("__start__", shape="point", width="0.01", style="invis")

        for state in sorted(self.states):
            if state in self.accepted_states:
                dot.node(
                    state,
                    label=state,
                    shape="doublecircle",
                    fillcolor="lightgreen",
                    peripheries="2",
                )
            else:
                dot.node(state, label=state)

        dot.edge("__start__", self.initial_state, penwidth="2")

        # Parallel edges share one arrow with a multi-line label
        edges = defaultdict(list)
        for t in self.transitions:
            if isinstance(t.input_symbol, tuple):
                inp_label = "".join(t.input_symbol)
            else:
                inp_label = str(t.input_symbol)
            pop_label = "".join(t.input_stack_symbols) or "ε"
            push_label = "".join(t.output_stack_symbols) or "ε"
            edges[(t.from_state, t.to_state)].append(
                f"{inp_label}, {pop_label} → {push_label}"
            )

        for (src, tgt), labels in edges.items():
            label = "\n".join(labels)
            if src == tgt:
                dot.edge(src, tgt, label=label, headport="n", tailport="n")
            else:
                dot.edge(src, tgt, label=label)

        if filename is not None:
            dot.render(filename, view=view, cleanup=True)
        return dot


# -----------------------------------------------------------------------------
# Configurations
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class Configuration:
    """
    Instantaneous snapshot of the automaton.

    Two configurations are equal when state, remaining word and stack are
    equal; the predecessor link in history takes no part in equality.
    """

    state: State
    word: Word
    stack: Stack
    history: Optional["Configuration"] = field(
        default=None, compare=False, repr=False
    )

    @property
    def key(self) -> Tuple[State, Word, Stack]:
        return (self.state, self.word, self.stack)

    def derivation(self) -> List["Configuration"]:
        """Configurations from the initial one up to and including this one."""
        chain = []
        config: Optional[Configuration] = self
        while config is not None:
            chain.append(config)
            config = config.history
        chain.reverse()
        return chain

    def __str__(self):
        word = "".join(self.word) or "ε"
        stack = "".join(self.stack) or "ε"
        return f"({self.state}, {word}, {stack})"


class ConfigurationSet:
    """
    Configurations unique under (state, word, stack).

    When an equal configuration is already present, the first one stays and
    keeps its history.
    """

    def __init__(self, configs: Iterable[Configuration] = ()):
        self._configs: Dict[Tuple[State, Word, Stack], Configuration] = {}
        for config in configs:
            self.add(config)

    def add(self, config: Configuration) -> bool:
        key = config.key
        if key in self._configs:
            return False
        self._configs[key] = config
        return True

    def __contains__(self, config: object) -> bool:
        if not isinstance(config, Configuration):
            return False
        return config.key in self._configs

    def __iter__(self) -> Iterator[Configuration]:
        return iter(self._configs.values())

    def __len__(self) -> int:
        return len(self._configs)

    def __repr__(self):
        return f"ConfigurationSet({', '.join(str(c) for c in self)})"


# -----------------------------------------------------------------------------
# Transition matching
# -----------------------------------------------------------------------------


def stack_top_matches(stack: Sequence[StackSymbol], symbols: Sequence[StackSymbol]) -> bool:
    """Whether the topmost len(symbols) elements of stack are exactly symbols."""
    if len(symbols) > len(stack):
        return False
    if not symbols:
        return True
    return tuple(stack[-len(symbols):]) == tuple(symbols)


def transition_matches(config: Configuration, transition: Transition) -> bool:
    if transition.from_state != config.state:
        return False

    if not stack_top_matches(config.stack, transition.input_stack_symbols):
        return False

    consumed = transition.consumed
    return tuple(config.word[: len(consumed)]) == consumed


def apply_transition(config: Configuration, transition: Transition) -> Configuration:
    """
    Configuration reached by firing transition from config.
    Only valid when transition_matches(config, transition) holds.
    """
    popped = len(transition.input_stack_symbols)
    stack = config.stack[: len(config.stack) - popped]

    return Configuration(
        state=transition.to_state,
        word=config.word[len(transition.consumed):],
        stack=stack + tuple(transition.output_stack_symbols),
        history=config,
    )


# -----------------------------------------------------------------------------
# Acceptance
# -----------------------------------------------------------------------------


def is_accepting(config: Configuration, definition: Definition) -> bool:
    # A word is only judged once it has been read completely
    if config.word:
        return False

    if definition.accept_through_empty_stack:
        return not config.stack

    return config.state in definition.accepted_states
