"""
Cliopatra matching engine.

What it does
- Takes a command set (the declarations) and the raw tokens (argv without the
  program name) and performs one match pass:
  • every token ends Matched or Unmatched, never both, never back;
  • matched flags are marked used, matched options receive their value,
    leftover tokens are assigned to arguments by position.
- Returns the per-token MatchItem list. The engine never raises on user input:
  unknown tokens and missing required parameters are reported by the caller
  (see CommandSet.validate).

Spellings
- Declared: '<prefix><name>' for every name of flags and options, paired with
  its prefixes (see paired(): short names take the shortest prefixes, long
  names the longer ones when prefixes of several lengths are declared).
- Convention spellings, only when the command set enables them:
  • posix:   '-n' for single-character names, values glued as '-ofile'.
  • gnu:     '--name' for multi-character names; a bare '--' ends matching.
  • multics: '-name' for multi-character names, '-'/'_' interchangeable.
  • runeimp: multics spellings plus '--abc' groups of single-letter flags.

Precedence (per token)
1. GNU terminator, when enabled.
2. An exact spelling equal to the whole token.
3. Group expansion (posix_groups '-abc', runeimp '--abc').
4. An option spelling followed by one of its suffixes ('--output=a.out') or,
   with posix, a glued short value ('-oa.out').
Within a step the longest prefix wins, ties go to the parameter declared first.

Option values
- attached (suffix or glued) first, otherwise the next token when it exists and
  is not itself a declared spelling; otherwise the option is marked as seen
  without value and its get_value() reports OptionValueMissingError unless a
  default source exists.
"""
import logging
from typing import NamedTuple

from .parameters import Kind

logger = logging.getLogger(__name__)


class MatchItem:
    """
    One input token during a match pass: (index, token, matched).

    Besides the triple, 'key' names the parameter that consumed the token and
    'role' says how: "name", "value", "group", "positional" or "terminator".
    """

    __slots__ = ("index", "token", "matched", "key", "role")

    def __init__(self, index, token, /):
        self.index = index
        self.token = token
        self.matched = False
        self.key = None
        self.role = None

    def consume(self, parameter, role, /):
        self.matched = True
        self.key = parameter.key if parameter is not None else None
        self.role = role

    def __rich_repr__(self):
        for name in self.__slots__:
            yield name, getattr(self, name)

    def __repr__(self):
        return "match-item(%s)" % ", ".join("%s=%r" % item for item in self.__rich_repr__())

    def __eq__(self, other):
        if not isinstance(other, MatchItem):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name) for name in self.__slots__)

    __hash__ = None


class Spelling(NamedTuple):
    text: str
    prefix: str
    name: str
    parameter: object
    order: int


def _items(tokens):
    items = []
    for position, token in enumerate(tokens, 1):
        if isinstance(token, MatchItem):
            items.append(MatchItem(token.index, token.token))
        elif isinstance(token, str):
            items.append(MatchItem(position, token))
        else:
            index, token = token
            items.append(MatchItem(index, token))
    return items


def _variants(name):
    return dict.fromkeys((name, name.replace("_", "-"), name.replace("-", "_")))


def paired(name, prefixes, /):
    """
    Prefixes a declared name is spelled with.

    With prefixes of a single length every name takes every prefix. With
    prefixes of several lengths, one-character names take the shortest ones and
    longer names the longer ones: names ["v", "verbose"] over ["-", "--"] give
    "-v" and "--verbose", never "-verbose" or "--v".
    """
    lengths = sorted({len(prefix) for prefix in prefixes})
    if len(lengths) < 2:
        return tuple(prefixes)
    if len(name) == 1:
        return tuple(prefix for prefix in prefixes if len(prefix) == lengths[0])
    return tuple(prefix for prefix in prefixes if len(prefix) > lengths[0])


def spellings(command_set, /):
    """
    Build the spelling table of a command set, in declaration order.
    """
    table = {}
    multics = command_set.multics or command_set.runeimp

    for order, parameter in enumerate(command_set.values()):
        if parameter.kind is Kind.ARGUMENT:
            continue
        for name in parameter.get_name():
            candidates = [(prefix, name) for prefix in paired(name, parameter.get_prefix())]
            if command_set.posix and len(name) == 1:
                candidates.append(("-", name))
            if command_set.gnu and len(name) > 1:
                candidates.append(("--", name))
            if multics and len(name) > 1:
                candidates.extend(("-", variant) for variant in _variants(name))
            for prefix, spelled in candidates:
                # First registration of a (text, parameter) pair wins.
                table.setdefault((prefix + spelled, id(parameter)), Spelling(
                    prefix + spelled, prefix, name, parameter, order
                ))

    return list(table.values())


def _best(candidates):
    return min(candidates, key=lambda candidate: (-len(candidate[0].prefix), candidate[0].order))


class _Pass:
    """
    State of one match pass over one token list.
    """

    def __init__(self, command_set, items):
        self.command_set = command_set
        self.items = items
        self.table = spellings(command_set)
        self.texts = {spelling.text for spelling in self.table}

    def exact(self, token):
        candidates = [(spelling, None) for spelling in self.table if spelling.text == token]
        return _best(candidates) if candidates else None

    def letter(self, letter):
        """
        The '-<letter>' spelling a group member stands for, or None.
        """
        found = self.exact("-" + letter)
        if found is None or found[0].prefix != "-" or len(found[0].name) != 1:
            return None
        return found[0]

    def attached(self, token):
        candidates = []
        for spelling in self.table:
            if spelling.parameter.kind is not Kind.OPTION:
                continue
            for suffix in spelling.parameter.get_suffix():
                if suffix and token.startswith(head := spelling.text + suffix):
                    candidates.append((spelling, token[len(head):]))
            if (
                self.command_set.posix and
                spelling.prefix == "-" and
                len(spelling.name) == 1 and
                len(token) > len(spelling.text) and
                token.startswith(spelling.text)
            ):
                candidates.append((spelling, token[len(spelling.text):]))
        return _best(candidates) if candidates else None

    def group(self, token):
        """
        Expand '-abc' (posix_groups) or '--abc' (runeimp) into its letters.

        Returns a list of (spelling, value) pairs, or None when the token is
        not a valid group. Only the last letter of a POSIX group may be an
        option; it takes the rest of the token as its value.
        """
        command_set = self.command_set
        if command_set.runeimp and token.startswith("--") and len(token) > 3:
            expanded = [self.letter(letter) for letter in token[2:]]
            if all(spelling is not None and spelling.parameter.kind is Kind.FLAG for spelling in expanded):
                return [(spelling, None) for spelling in expanded]
            return None

        if command_set.posix_groups and token.startswith("-") and not token.startswith("--") and len(token) > 2:
            expanded = []
            for position, letter in enumerate(token[1:], 1):
                spelling = self.letter(letter)
                if spelling is None:
                    return None
                if spelling.parameter.kind is Kind.OPTION:
                    expanded.append((spelling, token[position + 1:] or None))
                    return expanded
                expanded.append((spelling, None))
            return expanded

        return None

    def declared(self, token):
        return (
            token in self.texts or
            self.group(token) is not None or
            self.attached(token) is not None or
            (self.command_set.gnu and token == "--")
        )

    def apply(self, position, spelling, value, role):
        """
        Dispatch one match by parameter kind. Returns how many following
        tokens were consumed as a value.
        """
        item = self.items[position]
        parameter = spelling.parameter
        logger.debug("%03d | %r | %s | %s%s | ***MATCH***", item.index, item.token, parameter.key, spelling.prefix, spelling.name)

        item.consume(parameter, role)
        parameter.mark(item.index)

        match parameter.kind:
            case Kind.FLAG:
                parameter.set_flag()
                return 0
            case Kind.OPTION:
                if value is not None:
                    parameter.set_value(value)
                    return 0
                following = position + 1
                if following < len(self.items) and not self.declared(self.items[following].token):
                    self.items[following].consume(parameter, "value")
                    parameter.set_value(self.items[following].token)
                    return 1
                parameter.mark_attached(item.index)
                return 0
            case _:
                raise RuntimeError("unreachable")

    def run(self):
        position = 0
        terminated = False

        while position < len(self.items):
            item = self.items[position]
            logger.debug("%03d  %r", item.index, item.token)

            if terminated:
                position += 1
                continue

            if self.command_set.gnu and item.token == "--":
                item.consume(None, "terminator")
                terminated = True
                position += 1
                continue

            if found := self.exact(item.token):
                position += 1 + self.apply(position, *found, "name")
                continue

            if expanded := self.group(item.token):
                skip = 0
                for spelling, value in expanded:
                    # Every letter shares the group's token.
                    skip = max(skip, self.apply(position, spelling, value, "group"))
                position += 1 + skip
                continue

            if found := self.attached(item.token):
                position += 1 + self.apply(position, *found, "name")
                continue

            position += 1

        self.assign()
        return self.items

    def assign(self):
        """
        Positional pass: leftover tokens, in index order, go to the declared
        arguments in declaration order.
        """
        arguments = [parameter for parameter in self.command_set.values() if parameter.kind is Kind.ARGUMENT]
        leftovers = [item for item in self.items if not item.matched]
        for argument, item in zip(arguments, leftovers):
            logger.debug("%03d | %r | %s | positional", item.index, item.token, argument.key)
            item.consume(argument, "positional")
            argument.mark(item.index)
            argument.set_value(item.token)


def match(command_set, tokens, /):
    """
    Run one match pass of 'tokens' against 'command_set'.

    Parameters
    - command_set: CommandSet (or any ordered mapping of key → parameter exposing
      values() and the convention attributes posix/gnu/multics/runeimp/posix_groups).
    - tokens: iterable of strings (numbered from 1), of (index, token) pairs, or
      of MatchItem.

    Returns
    - list[MatchItem], one per token, in input order.

    Notes
    - Parameters are mutated in place; reset the command set first to repeat a pass.
    """
    items = _items(tokens)
    for item in _Pass(command_set, items).run():
        logger.debug("Args | %02d | %r", item.index, item)
    return items


def unmatched(items, /):
    """
    Tokens nobody consumed, in input order.
    """
    return [item for item in items if not item.matched]


__all__ = (
    "MatchItem",
    "Spelling",
    "spellings",
    "paired",
    "match",
    "unmatched",
)
