import os
import sys
from typing_extensions import *

from automaton import ConfigurationSet, Definition
from interpreter import Interpreter, InterpreterConfig, TickLimitError
from io_utils import is_epsilon_token, load_from_file


def print_trace(ticks: int, frontier: ConfigurationSet):
    print(f"Tick no. {ticks}, current configs:")
    for config in frontier:
        print(f"  {config}")


def _read_word(parts: List[str], index: int, alphabet: AbstractSet[str]) -> List[str]:
    if len(parts) <= index or is_epsilon_token(parts[index], alphabet):
        return []
    return list(parts[index])


def _load(filename: str, automata: Dict[str, Definition]):
    loaded = load_from_file(filename)
    automata.update(loaded)
    if loaded:
        print(f"Loaded {len(loaded)} automata: {', '.join(loaded.keys())}")
    else:
        print("No automata loaded")


def main(argv: Optional[List[str]] = None, env: Optional[Mapping[str, str]] = None):
    """Simple interactive terminal for magazine automata."""
    argv = sys.argv[1:] if argv is None else argv
    env = os.environ if env is None else env

    automata: Dict[str, Definition] = {}

    print("Magazine Automaton Terminal - Type 'help' for commands\n")

    try:
        config = InterpreterConfig.from_env(env, trace=print_trace)
    except ValueError as e:
        print(f"Error: {e}")
        config = InterpreterConfig(trace=print_trace if env.get("DEBUG") else None)

    if len(argv) > 1:
        print(f"Expected at most one automaton path, received {len(argv)}: {argv}")
        return

    if argv:
        try:
            _load(argv[0], automata)
        except (OSError, ValueError) as e:
            print(f"Failed to read automaton {argv[0]}: {e}")
            return
        if config.trace is not None:
            for name, definition in automata.items():
                print(f"Defined automaton {name}:\n{definition}\n")

    while True:
        try:
            command = input("> ").strip()
            if not command:
                continue

            parts = command.split()
            cmd = parts[0].lower()

            # Exit
            if cmd in ["exit", "quit"]:
                break

            # Help
            elif cmd == "help":
                print(
                    """
Commands:
  LOADING:
    load <file>                  - Load automata from file
    list                         - List all loaded automata

  AUTOMATA:
    show <name>                  - Show automaton definition
    graph <name>                 - Visualize automaton
    test <name> [word]           - Test if word is accepted (no word = ε)
    trace <name> [word]          - Print an accepting derivation

  SETTINGS:
    ticks [n]                    - Show or set the tick limit (<= 0: unbounded)
    debug on|off                 - Print every tick's configurations

  GENERAL:
    delete <name>                - Delete automaton
    clear                        - Clear all
    exit                         - Exit
"""
                )

            # Load
            elif cmd == "load":
                if len(parts) < 2:
                    print("Usage: load <filename>")
                    continue
                try:
                    _load(parts[1], automata)
                except Exception as e:
                    print(f"Error: {e}")

            # List
            elif cmd == "list":
                if automata:
                    print("Automata:")
                    for name, definition in sorted(automata.items()):
                        print(
                            f"  {name}: {definition.acceptance_mode}, "
                            f"{len(definition.states)} states, "
                            f"{len(definition.transitions)} transitions"
                        )
                else:
                    print("Nothing loaded")

            # Show automaton
            elif cmd == "show":
                if len(parts) < 2:
                    print("Usage: show <name>")
                elif parts[1] not in automata:
                    print(f"Automaton not found: {parts[1]}")
                else:
                    print(automata[parts[1]])

            # Graph automaton
            elif cmd == "graph":
                if len(parts) < 2:
                    print("Usage: graph <name>")
                elif parts[1] not in automata:
                    print(f"Automaton not found: {parts[1]}")
                else:
                    try:
                        automata[parts[1]].to_graphviz(filename=parts[1], view=True)
                        print(f"Created: {parts[1]}.png")
                    except Exception as e:
                        print(f"Error: {e}")

            # Test word on automaton
            elif cmd == "test":
                if len(parts) < 2:
                    print("Usage: test <name> [word]")
                elif parts[1] not in automata:
                    print(f"Automaton not found: {parts[1]}")
                else:
                    word = _read_word(parts, 2, automata[parts[1]].alphabet_symbols)
                    print(f"Read word: {''.join(word) or 'ε'}")
                    try:
                        result = Interpreter(automata[parts[1]], config).accepts_word(word)
                        print("ACCEPTED" if result else "REJECTED")
                    except TickLimitError as e:
                        print(f"UNDECIDED: {e}")

            # Accepting derivation
            elif cmd == "trace":
                if len(parts) < 2:
                    print("Usage: trace <name> [word]")
                elif parts[1] not in automata:
                    print(f"Automaton not found: {parts[1]}")
                else:
                    word = _read_word(parts, 2, automata[parts[1]].alphabet_symbols)
                    try:
                        steps = Interpreter(automata[parts[1]], config).derivation(word)
                        if steps is None:
                            print("REJECTED")
                        else:
                            for state, rest, stack in steps:
                                print(
                                    f"  ({state}, {''.join(rest) or 'ε'}, "
                                    f"{''.join(stack) or 'ε'})"
                                )
                            print("ACCEPTED")
                    except TickLimitError as e:
                        print(f"UNDECIDED: {e}")

            # Tick limit
            elif cmd == "ticks":
                if len(parts) < 2:
                    print(f"Tick limit: {config.max_ticks}")
                else:
                    try:
                        config = InterpreterConfig(int(parts[1]), config.trace)
                        print(f"Tick limit set to {config.max_ticks}")
                    except ValueError:
                        print("Usage: ticks [n]")

            # Debug tracing
            elif cmd == "debug":
                if len(parts) < 2 or parts[1].lower() not in ["on", "off"]:
                    print("Usage: debug on|off")
                else:
                    trace = print_trace if parts[1].lower() == "on" else None
                    config = InterpreterConfig(config.max_ticks, trace)
                    print(f"Debug {parts[1].lower()}")

            # Delete
            elif cmd == "delete":
                if len(parts) < 2:
                    print("Usage: delete <name>")
                elif parts[1] in automata:
                    del automata[parts[1]]
                    print(f"Deleted: {parts[1]}")
                else:
                    print(f"Automaton not found: {parts[1]}")

            # Clear
            elif cmd == "clear":
                automata.clear()
                print("Cleared")

            else:
                print(f"Unknown command: {cmd}")

        except KeyboardInterrupt:
            print("\nUse 'exit' to quit")
        except EOFError:
            break
        except Exception as e:
            print(f"Error: {e}")

    print("Goodbye!")
