from rich import print
from rich.pretty import pprint

from cliopatra import *

__prog__ = "demo"

commands = CommandSet("demo", summary="cliopatra playground", gnu=True, shell=True)
commands.add_flag("verbose", ["v", "verbose"], ["-", "--"], "show the match items")
commands.add_option("out", ["o", "output"], ["-", "--"], "output file", default="a.out", env="DEMO_OUTPUT")
commands.add_argument("source", help="input file", default="main.c")


if __name__ == '__main__':
    cli = Cliopatra(commands)
    cli.run()
    if cli["verbose"].get_flag():
        pprint(cli.items)
    cli.validate(cli.items)
    print(commands)
    print({key: parameter.get_value() for key, parameter in commands.items()})
