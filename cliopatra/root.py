"""
Cliopatra root adapter: the process-wide entry point.

Cliopatra wraps exactly one root CommandSet and is initialized once per process:
- the first Cliopatra(command_set) builds the instance;
- every later Cliopatra(...) returns that same instance untouched (its
  arguments are ignored and no parameter is registered again);
- Cliopatra.release() forgets the instance (embedding, tests).

run() acquires the argument vector (sys.argv unless given), keeps the program
name in 'app', numbers the remaining tokens from 1 and hands them to the
matching engine. Any attribute not defined here is looked up on the root
command set, so cli["verbose"].get_flag() reads naturally.

Example
    cs = CommandSet("tool")
    cs.add_flag("verbose", ["v"])
    cli = Cliopatra(cs)
    cli.run()
    if cli["verbose"].get_flag():
        ...
"""
import logging
import sys

from .commands import CommandSet
from .utils import *

logger = logging.getLogger(__name__)


class Cliopatra:
    """
    Process-wide root holding one CommandSet.
    """

    _instance = None

    app = mirror("app")
    items = mirror("items")

    @property
    def root(self):
        return self._root

    def __new__(cls, command_set=Unset, /):
        if cls._instance is not None:
            return cls._instance
        if command_set is Unset:
            command_set = CommandSet()
        if not isinstance(command_set, CommandSet):
            raise TypeError("Cliopatra() argument must be a command set")
        self = super().__new__(cls)
        self._root = command_set
        self._app = ""
        self._items = ()
        cls._instance = self
        logger.debug("root initialized with %r", command_set.name)
        return self

    @classmethod
    def release(cls):
        """
        Forget the process root; the next construction builds a new one.
        """
        cls._instance = None

    def __getattr__(self, name):
        # Only reached for names not defined on the adapter itself.
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self._root, name)

    def __getitem__(self, key):
        return self._root[key]

    def __contains__(self, key):
        return key in self._root

    def __rich__(self):
        return self._root.__rich__()

    def __repr__(self):
        return "cliopatra(app=%r, root=%r)" % (self._app, self._root)

    def run(self, argv=Unset, /, *, validate=False):
        """
        Match the process arguments against the root command set.

        Parameters
        - argv: Unset | Sequence[str]
          Full argument vector including the program name; sys.argv when Unset.
        - validate: bool
          Also run CommandSet.validate() on the result.

        Returns
        - list[MatchItem] for argv[1:], indexed from 1.
        """
        argv = list(coalesce(argv, sys.argv))
        self._app = argv[0] if argv else ""
        tokens = []
        for index, token in enumerate(argv[1:], 1):
            logger.debug("%03d  %r", index, token)
            tokens.append((index, token))
        items = self._root.match(tokens)
        self._items = items
        if validate:
            self._root.validate(items)
        return items


__all__ = (
    "Cliopatra",
)
