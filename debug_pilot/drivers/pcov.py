"""Pcov driver for fast code-coverage collection.

Pcov is a lightweight alternative to Xdebug's coverage mode. The two
conflict, so configuring Pcov also removes ``coverage`` from any
``xdebug.mode`` line in php.ini.
"""

import re

from debug_pilot.config.schemas import DebugSettings
from debug_pilot.drivers import register_driver
from debug_pilot.drivers.base import (
    FAIL_MARK,
    PASS_MARK,
    WARN_MARK,
    ExtensionSpec,
    HealthCheckResult,
    PhpExtensionDriver,
    configure_via_block,
)
from debug_pilot.utils.environment import EnvironmentDetector
from debug_pilot.utils.markers import make_end_marker, make_start_marker, wrap_block

PCOV_SPEC = ExtensionSpec(
    name="pcov",
    directive_pattern=r"""extension[ \t]*=[ \t]*["']?(?:.*[/\\])?pcov(?:\.so|\.dll)?["']?""",
    block_start=make_start_marker("Pcov"),
    block_end=make_end_marker("Pcov"),
    directive_prefix="extension=",
)

_XDEBUG_MODE_LINE_RE = re.compile(
    r"^([ \t]*xdebug\.mode[ \t]*=[ \t]*)([^;\s][^;\r\n]*?)([ \t]*(?:;[^\r\n]*)?)(\r?)$",
    re.MULTILINE,
)


def remove_xdebug_coverage(content: str) -> str:
    """Remove the ``coverage`` mode from every ``xdebug.mode`` line.

    Remaining modes keep their order. A line left without modes becomes
    ``off``. Indentation and a trailing ``; comment`` are kept.

    Example:
        "xdebug.mode = debug,coverage" -> "xdebug.mode = debug"
    """

    def rewrite(match: re.Match[str]) -> str:
        modes = [m.strip() for m in match.group(2).split(",")]
        modes = [m for m in modes if m and m != "coverage"]
        value = ",".join(modes) if modes else "off"
        return f"{match.group(1)}{value}{match.group(3)}{match.group(4)}"

    return _XDEBUG_MODE_LINE_RE.sub(rewrite, content)


@register_driver("pcov")
class PcovDriver(PhpExtensionDriver):
    """Driver for the Pcov extension."""

    def __init__(self, env: EnvironmentDetector, spec: ExtensionSpec = PCOV_SPEC):
        super().__init__(env, spec)

    def configure(self, settings: DebugSettings) -> bool:
        """Write the Pcov block, disabling Xdebug coverage in the same write."""
        ini_path = self.resolve_ini_path(settings.php_ini_path)

        return configure_via_block(
            ini_path,
            strip_existing=self.strip_block,
            build_block=self.build_block,
            preprocess=remove_xdebug_coverage,
        )

    def build_block(self) -> str:
        return wrap_block(
            self._spec.block_start,
            self._spec.block_end,
            [
                "[pcov]",
                "pcov.enabled   = 1",
                "pcov.directory = .",
                "; Exclude vendor from coverage by default",
                "pcov.exclude   = /vendor/",
            ],
        )

    def verify(self) -> HealthCheckResult:
        """Check that Pcov is enabled and Xdebug coverage is not competing with it."""
        if not self.is_installed():
            return HealthCheckResult.fail(self.name, ["Pcov extension is not loaded."])

        messages = []
        passed = True

        enabled = self._env.get_ini_value("pcov.enabled") or ""
        if enabled in ("1", "On"):
            messages.append(f"{PASS_MARK} pcov.enabled = 1")
        else:
            messages.append(f"{FAIL_MARK} pcov.enabled = {enabled or '0'} (expected 1)")
            passed = False

        if self._env.is_extension_loaded("xdebug"):
            xdebug_mode = self._env.get_ini_value("xdebug.mode") or "off"
            modes = [m.strip() for m in xdebug_mode.split(",")]
            if "coverage" in modes:
                messages.append(
                    f"{WARN_MARK} Xdebug coverage mode is still active "
                    f"(xdebug.mode={xdebug_mode}). This may conflict with Pcov."
                )
                passed = False
            else:
                messages.append(f"{PASS_MARK} Xdebug coverage mode is not active, no conflict.")

        return HealthCheckResult(passed=passed, messages=messages, driver_name=self.name)
