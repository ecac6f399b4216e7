"""Xdebug driver.

Detects, configures and verifies the Xdebug extension for step debugging
from any IDE that speaks DBGp.
"""

from debug_pilot.config.schemas import DEFAULT_CLIENT_PORT, DebugSettings
from debug_pilot.drivers import register_driver
from debug_pilot.drivers.base import (
    FAIL_MARK,
    INFO_MARK,
    PASS_MARK,
    WARN_MARK,
    ExtensionSpec,
    HealthCheckResult,
    PhpExtensionDriver,
    configure_via_block,
)
from debug_pilot.utils.environment import EnvironmentDetector
from debug_pilot.utils.ini_editor import read_directive
from debug_pilot.utils.markers import make_end_marker, make_start_marker, wrap_block

XDEBUG_SPEC = ExtensionSpec(
    name="xdebug",
    directive_pattern=r"""zend_extension[ \t]*=[ \t]*["']?(?:.*[/\\])?xdebug(?:\.so|\.dll)?["']?""",
    block_start=make_start_marker("Xdebug"),
    block_end=make_end_marker("Xdebug"),
    directive_prefix="zend_extension=",
)

_START_WITH_REQUEST_ON = ("yes", "1", "On")


@register_driver("xdebug")
class XdebugDriver(PhpExtensionDriver):
    """Driver for the Xdebug extension."""

    def __init__(self, env: EnvironmentDetector, spec: ExtensionSpec = XDEBUG_SPEC):
        super().__init__(env, spec)

    def configure(self, settings: DebugSettings) -> bool:
        """Write the Xdebug block (mode, client host/port, IDE key) to php.ini."""
        ini_path = self.resolve_ini_path(settings.php_ini_path)
        client_host = self.resolve_client_host(settings.client_host)

        return configure_via_block(
            ini_path,
            strip_existing=self.strip_block,
            build_block=lambda: self.build_block(settings, client_host),
        )

    def resolve_client_host(self, configured_host: str) -> str:
        """Resolve "auto" through the environment; other values are used verbatim."""
        if configured_host != "auto":
            return configured_host
        return self._env.get_client_host()

    def build_block(self, settings: DebugSettings, client_host: str) -> str:
        return wrap_block(
            self._spec.block_start,
            self._spec.block_end,
            [
                "[xdebug]",
                f"xdebug.mode                 = {settings.xdebug_mode}",
                f"xdebug.client_host          = {client_host}",
                f"xdebug.client_port          = {settings.client_port}",
                f"xdebug.idekey               = {settings.ide_key}",
                "xdebug.start_with_request   = yes",
                "xdebug.discover_client_host = false",
            ],
        )

    def verify(self) -> HealthCheckResult:
        """Check the Xdebug settings written to php.ini.

        The raw file is inspected rather than the runtime values so that a
        configuration written but not yet loaded can still be verified.
        """
        if not self.is_installed():
            return HealthCheckResult.fail(self.name, ["Xdebug extension is not loaded."])

        content = self._read_detected_ini() or ""
        messages = []
        passed = True

        mode = read_directive(content, "xdebug.mode") or "off"
        if mode != "off":
            messages.append(f"{PASS_MARK} xdebug.mode = {mode}")
        else:
            messages.append(f"{FAIL_MARK} xdebug.mode is 'off': no Xdebug features are active.")
            passed = False

        host = read_directive(content, "xdebug.client_host") or "localhost"
        messages.append(f"{INFO_MARK} xdebug.client_host = {host}")

        port = read_directive(content, "xdebug.client_port") or str(DEFAULT_CLIENT_PORT)
        messages.append(f"{INFO_MARK} xdebug.client_port = {port}")

        start = read_directive(content, "xdebug.start_with_request") or "default"
        if start in _START_WITH_REQUEST_ON:
            messages.append(f"{PASS_MARK} xdebug.start_with_request = yes")
        else:
            messages.append(f"{WARN_MARK} xdebug.start_with_request = {start} (recommend 'yes')")

        return HealthCheckResult(passed=passed, messages=messages, driver_name=self.name)
