"""
Parameter behavioral tests (declaration, coercion, default resolution).

Scope
- Validate declaration faults (names, keys, default source names).
- Validate the boolean rule and numeric coercions.
- Validate the command line → config/environment → default chain.

Conventions
- Test method names follow CamelCase per project convention.
- Environment and config are injected through CommandSet mappings; os.environ is never touched.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from cliopatra import CommandSet, Flag, Option, Argument, Parameter, Kind
from cliopatra.faults import (
    InvalidNameError,
    EmptyKeyError,
    EmptyEnvDefaultNameError,
    EmptyConfigDefaultNameError,
    MissingValueError,
    OptionMissingError,
    ArgumentMissingError,
)


class TestDeclaration(TestCase):
    """Names, keys, affixes and kinds."""

    def testBaseParameterNotInstantiable(self):
        with self.assertRaises(TypeError):
            Parameter("x")

    def testKindsSupplyResolution(self):
        for name in ("set_default", "get_value", "missing"):
            self.assertNotIn(name, vars(Parameter))
            for kind in (Flag, Option, Argument):
                self.assertTrue(callable(getattr(kind, name, None)), (kind, name))

    def testKindsAreTagged(self):
        self.assertIs(Flag("v").kind, Kind.FLAG)
        self.assertIs(Option("o").kind, Kind.OPTION)
        self.assertIs(Argument().kind, Kind.ARGUMENT)

    def testBlankNameRejectedAndNamesUnchanged(self):
        option = Option("o", "output")
        with self.assertRaises(InvalidNameError) as context:
            option.set_name(["x", "   "])
        self.assertIsInstance(context.exception, ValueError)
        self.assertEqual(option.get_name(), ("o", "output"))

    def testNamesAreStripped(self):
        self.assertEqual(Flag(" v ").get_name(), ("v",))

    def testEmptyKeyRejected(self):
        flag = Flag("v", key="verbose")
        with self.assertRaises(EmptyKeyError):
            flag.set_key("")
        self.assertEqual(flag.key, "verbose")

    def testSetPrefixReplaceAndAppend(self):
        option = Option("o", prefixes="-")
        option.set_prefix(["--", "-"], append=True)
        self.assertEqual(option.get_prefix(), ("-", "--"))
        option.set_prefix("+")
        self.assertEqual(option.get_prefix(), ("+",))

    def testSetSuffixDeduplicates(self):
        option = Option("o", suffixes=["=", ":", "="])
        self.assertEqual(option.get_suffix(), ("=", ":"))

    def testHelpIsStripped(self):
        self.assertEqual(Flag("v", help="  be loud ").get_help(), "be loud")

    def testArgumentHasNoMatchableNames(self):
        argument = Argument("file")
        self.assertEqual(argument.get_name(), ())
        self.assertEqual(argument.names, ("file",))

    def testEmptyEnvDefaultNameRejected(self):
        with self.assertRaises(EmptyEnvDefaultNameError):
            Option("o").set_env_default("  ")

    def testEmptyConfigDefaultNameRejected(self):
        with self.assertRaises(EmptyConfigDefaultNameError):
            Argument().set_config_default("")

    def testSetFlagRejectedOnValuedKinds(self):
        with self.assertRaises(TypeError):
            Option("o").set_flag()
        with self.assertRaises(TypeError):
            Argument().set_flag()

    def testReprUsesTypename(self):
        self.assertTrue(repr(Flag("v", key="verbose")).startswith("flag("))


class TestFlag(TestCase):
    """Presence, boolean rule and static defaults."""

    def testFlagDefaultsToFalse(self):
        flag = Flag("v")
        self.assertFalse(flag.get_flag())
        self.assertEqual(flag.get_value(), "false")
        self.assertFalse(flag.matched)

    def testSetFlagMarksUsed(self):
        flag = Flag("v")
        flag.set_flag()
        self.assertTrue(flag.get_flag())
        self.assertTrue(flag.matched)
        self.assertEqual(flag.get_int(), 1)
        self.assertEqual(flag.get_number(), 1.0)

    def testSetValueUsesTruthyRule(self):
        flag = Flag("v")
        for text, expected in (("1", True), ("TRUE", True), ("Yes", True), ("no", False), (" true", False), ("", False)):
            flag.set_value(text)
            self.assertIs(flag.get_flag(), expected, text)

    def testStaticDefaultSurvivesReset(self):
        flag = Flag("v", default="yes")
        self.assertTrue(flag.get_flag())
        flag.set_value("0")
        self.assertFalse(flag.get_flag())
        flag.reset()
        self.assertTrue(flag.get_flag())

    def testBooleanDefaultAccepted(self):
        self.assertTrue(Flag("v", default=True).get_flag())

    def testMissingBuildsFlagFault(self):
        fault = Flag("v", key="verbose").missing()
        self.assertIsInstance(fault, MissingValueError)
        self.assertEqual(fault.options["key"], "verbose")


class TestResolution(TestCase):
    """Command line, config, environment and static defaults."""

    def testOptionWithoutSourcesIsMissing(self):
        option = Option("o")
        with self.assertRaises(OptionMissingError) as context:
            option.get_value()
        self.assertIsInstance(context.exception, LookupError)
        self.assertFalse(option.get_flag())

    def testArgumentWithoutSourcesIsMissing(self):
        with self.assertRaises(ArgumentMissingError):
            Argument().get_value()

    def testStaticDefault(self):
        option = Option("o", default="a.out")
        self.assertEqual(option.get_value(), "a.out")
        self.assertEqual(option.source, "default")
        self.assertFalse(option.matched)

    def testEnvironmentPreferredByDefault(self):
        commands = CommandSet(environ={"APP_OUT": "env.out"}, config={"out": "cfg.out"})
        option = commands.add_option("out", "o", env="APP_OUT", config="out", default="a.out")
        self.assertEqual(option.get_value(), "env.out")
        self.assertEqual(option.source, "environment")

    def testConfigPreferred(self):
        commands = CommandSet(environ={"APP_OUT": "env.out"}, config={"out": "cfg.out"})
        option = commands.add_option("out", "o", env="APP_OUT", config="out", preferred=True)
        self.assertEqual(option.get_value(), "cfg.out")
        self.assertEqual(option.source, "config")

    def testFallsThroughToOtherSource(self):
        commands = CommandSet(environ={}, config={"out": "cfg.out"})
        option = commands.add_option("out", "o", env="APP_OUT", config="out")
        self.assertEqual(option.get_value(), "cfg.out")

    def testEmptyEnvironmentValueIsAbsent(self):
        commands = CommandSet(environ={"APP_OUT": ""})
        option = commands.add_option("out", "o", env="APP_OUT", default="a.out")
        self.assertEqual(option.get_value(), "a.out")

    def testCommandLineWins(self):
        commands = CommandSet(environ={"APP_OUT": "env.out"})
        option = commands.add_option("out", "o", env="APP_OUT")
        option.set_value("cli.out")
        self.assertEqual(option.get_value(), "cli.out")
        self.assertTrue(option.matched)

    def testCommandLineWinsOverPreferredConfig(self):
        commands = CommandSet(environ={"APP_OUT": "env.out"}, config={"out": "cfg.out"})
        option = commands.add_option("out", "o", env="APP_OUT", config="out", preferred=True)
        commands.match(["-o", "cli.out"])
        self.assertEqual(option.get_value(), "cli.out")
        self.assertEqual(option.source, "command-line")
        option.reset()
        option.set_value("set.out")
        self.assertEqual(option.get_value(), "set.out")
        self.assertEqual(option.source, "command-line")

    def testResolutionIsMaterialized(self):
        environ = {"APP_OUT": "first"}
        option = CommandSet(environ=environ).add_option("out", "o", env="APP_OUT")
        self.assertEqual(option.get_value(), "first")
        environ["APP_OUT"] = "second"
        self.assertEqual(option.get_value(), "first")
        option.reset()
        self.assertEqual(option.get_value(), "second")


class TestCoercion(TestCase):
    """Numeric accessors surface parser errors unchanged."""

    def testGetInt(self):
        option = Option("n")
        option.set_value("42")
        self.assertEqual(option.get_int(), 42)
        self.assertEqual(option.get_uint(), 42)

    def testGetIntMalformed(self):
        option = Option("n")
        option.set_value("forty")
        with self.assertRaises(ValueError):
            option.get_int()

    def testGetUintRejectsNegative(self):
        option = Option("n")
        option.set_value("-3")
        self.assertEqual(option.get_int(), -3)
        with self.assertRaises(ValueError):
            option.get_uint()

    def testBlanksAndGroupingRejected(self):
        option = Option("n")
        for text in (" 42", "42 ", "4_2", "1_000.5"):
            option.set_value(text)
            with self.assertRaises(ValueError, msg=text):
                option.get_int() if "." not in text else option.get_number()

    def testGetUintRejectsSign(self):
        option = Option("n")
        option.set_value("+5")
        self.assertEqual(option.get_int(), 5)
        with self.assertRaises(ValueError):
            option.get_uint()

    def testGetNumber(self):
        argument = Argument(default="2.5")
        self.assertEqual(argument.get_number(), 2.5)

    def testMissingIsNotValueError(self):
        with self.assertRaises(MissingValueError):
            Option("n").get_int()


if __name__ == "__main__":
    unittest.main()
