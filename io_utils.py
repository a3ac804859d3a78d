import os
import re
from typing_extensions import *

from automaton import EPSILON, Definition, InputSymbol, Stack, Transition

EPSILON_TOKENS = ["eps", "epsilon", "ε", "e"]

HEADER_LINES = 7


def is_epsilon_token(token: str, symbols: AbstractSet[str]) -> bool:
    # 'e' stays a symbol when the automaton declares it as one
    return token.lower() in EPSILON_TOKENS and token not in symbols


def _parse_input_symbol(token: str, alphabet: AbstractSet[str]) -> InputSymbol:
    if is_epsilon_token(token, alphabet):
        return EPSILON
    if token in alphabet:
        return token
    if all(ch in alphabet for ch in token):
        return tuple(token)
    raise ValueError(f"Input symbol {token!r} is not made of alphabet symbols")


def _parse_stack_string(token: str, stack_symbols: AbstractSet[str]) -> Stack:
    if is_epsilon_token(token, stack_symbols) or token == "-":
        return ()
    unknown = [ch for ch in token if ch not in stack_symbols]
    if unknown:
        raise ValueError(f"Unknown stack symbols {unknown} in {token!r}")
    return tuple(token)


def parse_definition(text: str) -> Definition:
    """
    Parse one automaton definition.

    Lines, in order: states, alphabet symbols, stack symbols, initial state,
    initial stack symbol, accepted states (blank or '-' for none), E (empty
    stack) or F (final state), then one transition per line:

        from input pop to push
    """
    raw_lines = [raw.strip() for raw in text.strip().split("\n")]

    # Header lines are positional, so blank lines inside the header count
    start = 0
    while start < len(raw_lines) and (
        not raw_lines[start] or raw_lines[start].startswith("#")
    ):
        start += 1

    header = [line.split() for line in raw_lines[start : start + HEADER_LINES]]
    if len(header) < HEADER_LINES:
        raise ValueError(
            f"Definition needs {HEADER_LINES} header lines, got {len(header)}"
        )

    (
        states,
        alphabet_symbols,
        stack_symbols,
        initial_states,
        initial_stack_symbols,
        accepted_states,
        acceptance,
    ) = header
    transition_lines = [
        line.split()
        for line in raw_lines[start + HEADER_LINES :]
        if line and not line.startswith("#")
    ]

    if len(initial_states) != 1:
        raise ValueError("Initial state line should contain one state")

    if len(initial_stack_symbols) != 1:
        raise ValueError("Initial stack symbol line should contain one symbol")

    if not accepted_states or accepted_states == ["-"]:
        accepted_states = []

    if acceptance == ["E"]:
        accept_through_empty_stack = True
    elif acceptance == ["F"]:
        accept_through_empty_stack = False
    else:
        raise ValueError("Acceptance line should contain 'E' or 'F'")

    alphabet = frozenset(alphabet_symbols)
    stack_alphabet = frozenset(stack_symbols)

    transitions = []
    for parts in transition_lines:
        if len(parts) != 5:
            raise ValueError(
                f"Transition line should contain 5 fields: {' '.join(parts)}"
            )
        src, input_sym, pop, tgt, push = parts

        transitions.append(
            Transition(
                from_state=src,
                input_symbol=_parse_input_symbol(input_sym, alphabet),
                input_stack_symbols=_parse_stack_string(pop, stack_alphabet),
                to_state=tgt,
                output_stack_symbols=_parse_stack_string(push, stack_alphabet),
            )
        )

    return Definition(
        states=frozenset(states),
        alphabet_symbols=alphabet,
        stack_symbols=stack_alphabet,
        initial_state=initial_states[0],
        initial_stack_symbol=initial_stack_symbols[0],
        accepted_states=frozenset(accepted_states),
        accept_through_empty_stack=accept_through_empty_stack,
        transitions=tuple(transitions),
    )


def parse_definitions(content: str) -> List[Definition]:
    """Parse several definitions separated by '---'."""
    return [
        parse_definition(block)
        for block in content.split("---")
        if block.strip()
    ]


def load_from_file(filename: str) -> Dict[str, Definition]:
    """
    Load automata from a file, keyed by name.

    Files with 'NAME:' section headers yield one automaton per section and
    skip sections that fail to parse. Otherwise the file holds one or more
    '---' separated definitions named after the file.
    """
    automata: Dict[str, Definition] = {}

    with open(filename, "r", encoding="utf-8") as f:
        content = f.read()

    name_pattern = re.compile(r"^([A-Za-z]\w*):\s*$", re.MULTILINE)

    if name_pattern.search(content):
        sections = name_pattern.split(content)

        for i in range(1, len(sections), 2):
            if i + 1 >= len(sections):
                continue

            name = sections[i].strip()
            definition = sections[i + 1].strip()

            if not definition:
                continue

            try:
                automata[name] = parse_definition(definition)
            except ValueError as e:
                print(f"Warning: Failed to load automaton '{name}': {e}")
    else:
        base_name = os.path.basename(filename).rsplit(".", 1)[0]

        for idx, definition in enumerate(parse_definitions(content)):
            key = f"{base_name}{idx if idx > 0 else ''}"
            automata[key] = definition

    return automata
