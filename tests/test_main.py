"""
End-to-End Tests for the Admiral Entry Point

Runs whole configurations through the runners and the aggregator, both
in-process and as a subprocess of the command line entry point.
"""

import io
import os
import subprocess
import sys
import tempfile
import textwrap
import threading
import time
import unittest
from pathlib import Path
from unittest.mock import patch

SRC_DIR = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(SRC_DIR))

from config_validator import ConfigurationError, validate_configuration
from main import (
    parse_args,
    read_config_file,
    resolve_config_path,
    run_status_line,
)
from config.paths import find_config_file
from runners.periodic_runner import PeriodicRunner
from statusline.aggregator import Aggregator
from statusline.channel import ScriptSpawnError, UpdateChannel
from statusline.models import ItemSpec, Policy

ENVIRON = {"SHELL": "/bin/sh"}


def static_items(*pairs):
    config = {"admiral": {"items": [name for name, _ in pairs]}}
    for name, command in pairs:
        config[name] = {"path": command, "static": True}
    return config


class TestRunStatusLine(unittest.TestCase):
    """In-process runs of complete configurations."""

    def run_config(self, config):
        output = io.StringIO()
        status_config = validate_configuration(config, ENVIRON)
        printed = run_status_line(status_config, None, output=output)
        return printed, output.getvalue().splitlines()

    def test_static_items_render_in_declared_order(self):
        """Three static items end in one line, concatenated left to right."""
        config = static_items(
            ("clock", "sleep 0.2; echo 12:00"),
            ("battery", "sleep 0.1; echo 87%"),
            ("load", "echo 0.42"),
        )
        printed, lines = self.run_config(config)

        self.assertEqual(lines[-1], "12:0087%0.42")
        self.assertEqual(printed, len(lines))
        self.assertEqual(len(lines), len(set(lines)))

    def test_simultaneous_static_items_print_once(self):
        config = static_items(("clock", "echo 12:00"), ("battery", "echo 87%"))
        config["admiral"]["settle_delay"] = 0.5
        printed, lines = self.run_config(config)
        self.assertEqual(lines, ["12:0087%"])
        self.assertEqual(printed, 1)

    def test_missing_item_is_skipped(self):
        """An item without a section is reported and the rest still render."""
        config = static_items(("clock", "echo 12:00"), ("load", "echo 0.42"))
        config["admiral"]["items"] = ["clock", "ghost", "load"]

        with self.assertLogs("config_validator", level="WARNING") as logs:
            _, lines = self.run_config(config)

        self.assertIn("No ghost found", logs.output[0])
        self.assertEqual(lines[-1], "12:000.42")

    def test_item_listed_twice_renders_twice(self):
        """A repeated item name fills both of its slots and the run ends."""
        config = static_items(("clock", "echo 12:00"))
        config["admiral"]["items"] = ["clock", "clock"]

        result = {}

        def render():
            result["printed"], result["lines"] = self.run_config(config)

        consumer = threading.Thread(target=render)
        consumer.start()
        consumer.join(timeout=10)

        self.assertFalse(consumer.is_alive())
        self.assertEqual(result["lines"][-1], "12:0012:00")

    def test_identical_outputs_print_nothing_new(self):
        """A periodic item repeating the same text prints one line."""
        channel = UpdateChannel()
        spec = ItemSpec(
            name="same",
            position=0,
            command="echo constant",
            shell="/bin/sh",
            policy=Policy.PERIODIC,
            interval=0.01,
        )
        runner = PeriodicRunner(spec, channel.sender())
        output = io.StringIO()
        aggregator = Aggregator(channel, 1, output=output)

        consumer = threading.Thread(target=aggregator.run)
        consumer.start()
        runner.start()
        time.sleep(0.5)
        runner.stop()
        consumer.join(timeout=5)

        self.assertFalse(consumer.is_alive())
        self.assertGreater(runner.updates_sent, 2)
        self.assertEqual(output.getvalue().splitlines(), ["constant"])
        self.assertEqual(aggregator.lines_printed, 1)

    def test_spawn_failure_propagates(self):
        config = static_items(("clock", "echo 12:00"))
        config["clock"]["shell"] = "/nonexistent/admiral-shell"
        with self.assertRaises(ScriptSpawnError):
            self.run_config(config)


class TestConfigFiles(unittest.TestCase):
    """Configuration discovery and parsing."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def write(self, name, text):
        path = self.root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(text))
        return path

    def test_read_toml(self):
        path = self.write(
            "admiral.toml",
            """
            [admiral]
            items = ["clock"]

            [clock]
            path = "date"
            reload = 1.5
            """,
        )
        document = read_config_file(path)
        self.assertEqual(document["admiral"]["items"], ["clock"])
        self.assertEqual(document["clock"]["reload"], 1.5)

    def test_read_yaml(self):
        path = self.write(
            "admiral.yaml",
            """
            admiral:
              items: [clock]
            clock:
              path: date
              static: true
            """,
        )
        document = read_config_file(path)
        self.assertTrue(document["clock"]["static"])

    def test_syntax_error(self):
        path = self.write("admiral.toml", "[admiral\nitems = ")
        with self.assertRaises(ConfigurationError) as ctx:
            read_config_file(path)
        self.assertIn("Syntax error", str(ctx.exception))

    def test_find_config_prefers_xdg(self):
        xdg = self.write("xdg/admiral.d/admiral.toml", "")
        self.write("home/.config/admiral.d/admiral.toml", "")
        environ = {
            "XDG_CONFIG_HOME": str(self.root / "xdg"),
            "HOME": str(self.root / "home"),
        }
        self.assertEqual(find_config_file(environ), xdg)

    def test_find_config_falls_back_to_home(self):
        home = self.write("home/.config/admiral.d/admiral.toml", "")
        environ = {
            "XDG_CONFIG_HOME": str(self.root / "xdg"),
            "HOME": str(self.root / "home"),
        }
        self.assertEqual(find_config_file(environ), home)

    def test_find_config_yaml(self):
        yaml_path = self.write("home/.config/admiral.d/admiral.yaml", "")
        self.assertEqual(find_config_file({"HOME": str(self.root / "home")}), yaml_path)

    def test_find_config_none(self):
        self.assertIsNone(find_config_file({"HOME": str(self.root)}))

    def test_resolve_rejects_directory(self):
        with self.assertRaises(ConfigurationError) as ctx:
            resolve_config_path(str(self.root))
        self.assertEqual(str(ctx.exception), "Invalid configuration file specified")

    def test_resolve_not_found(self):
        with patch("main.find_config_file", return_value=None):
            with self.assertRaises(ConfigurationError) as ctx:
                resolve_config_path(None)
        self.assertEqual(str(ctx.exception), "Configuration file not found")

    def test_parse_args(self):
        args = parse_args(["-c", "/tmp/admiral.toml", "--log-level", "debug"])
        self.assertEqual(args.config, "/tmp/admiral.toml")
        self.assertEqual(args.log_level, "debug")
        self.assertIsNone(parse_args([]).config)


class TestCommandLine(unittest.TestCase):
    """Runs of ``src/main.py`` as a separate process."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def run_admiral(self, config_text, timeout=20):
        config = self.root / "admiral.toml"
        config.write_text(textwrap.dedent(config_text))
        env = dict(os.environ, SHELL="/bin/sh")
        return subprocess.run(
            [sys.executable, str(SRC_DIR / "main.py"), "-c", str(config)],
            capture_output=True,
            text=True,
            timeout=timeout,
            env=env,
        )

    def test_end_to_end_static_line(self):
        (self.root / "load.sh").write_text("echo 0.42\n")
        result = self.run_admiral(
            """
            [admiral]
            items = ["clock", "battery", "ghost", "load"]
            settle_delay = 0.3

            [clock]
            path = "echo 12:00"
            static = true

            [battery]
            path = "printf '87%%\\r\\n'"
            static = true

            [load]
            path = "sh ./load.sh"
            static = true
            """
        )

        self.assertEqual(result.returncode, 0, result.stderr)
        self.assertEqual(result.stdout.splitlines()[-1], "12:0087%0.42")
        self.assertIn("No ghost found", result.stderr)

    def test_configuration_error_exits_non_zero(self):
        result = self.run_admiral(
            """
            [admiral]
            items = ["clock"]

            [clock]
            path = ["date"]
            """
        )
        self.assertEqual(result.returncode, 1)
        self.assertEqual(result.stdout, "")
        self.assertIn("arrays are deprecated", result.stderr)

    def test_invalid_logging_format_exits_non_zero(self):
        """A malformed logging table is a configuration error, not a crash."""
        result = self.run_admiral(
            """
            [admiral]
            items = ["clock"]

            [logging]
            format = "x"

            [clock]
            path = "echo 12:00"
            static = true
            """
        )
        self.assertEqual(result.returncode, 1)
        self.assertEqual(result.stdout, "")
        self.assertIn("logging.format", result.stderr)
        self.assertNotIn("Traceback", result.stderr)

    def test_spawn_error_exits_non_zero(self):
        result = self.run_admiral(
            """
            [admiral]
            items = ["clock"]

            [clock]
            path = "date"
            shell = "/nonexistent/admiral-shell"
            """
        )
        self.assertEqual(result.returncode, 1)
        self.assertIn("Failed to run date", result.stderr)

    def test_missing_config_file(self):
        result = subprocess.run(
            [sys.executable, str(SRC_DIR / "main.py"), "-c", str(self.root / "nope.toml")],
            capture_output=True,
            text=True,
            timeout=20,
        )
        self.assertEqual(result.returncode, 1)
        self.assertIn("Invalid configuration file specified", result.stderr)


if __name__ == "__main__":
    unittest.main()
