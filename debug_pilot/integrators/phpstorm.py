"""PhpStorm integrator.

Writes a "PHP Remote Debug" run configuration under
``.idea/runConfigurations/`` and, when none exists yet, a server
definition with path mappings in ``.idea/php.xml``.
"""

import logging
from pathlib import Path
from xml.sax.saxutils import quoteattr

from debug_pilot.drivers.base import DebuggerDriver
from debug_pilot.integrators import register_integrator
from debug_pilot.integrators.base import IdeIntegrator, display_name

logger = logging.getLogger(__name__)

SERVER_NAME = "DebugPilot"
IDE_KEY = "PHPSTORM"

_SERVER_CONFIG = """\
<?xml version="1.0" encoding="UTF-8"?>
<project version="4">
  <component name="PhpProjectServersManager">
    <servers>
      <server host="localhost" id="debug-pilot" name="{server}" port="80" use_path_mappings="true">
        <path_mappings>
          <mapping local-root="$PROJECT_DIR$" remote-root="/var/www/html" />
        </path_mappings>
      </server>
    </servers>
  </component>
</project>
"""


@register_integrator("phpstorm")
class PhpStormIntegrator(IdeIntegrator):
    """Integrator for JetBrains PhpStorm.

    Files:
    .idea/
    ├── php.xml                                   # Server + path mappings (only if absent)
    └── runConfigurations/
        └── PHP_Debug_Pilot_{Driver}.xml          # Remote debug configuration
    """

    @property
    def name(self) -> str:
        return "phpstorm"

    def is_detected(self, project_path: Path) -> bool:
        return (project_path / ".idea").is_dir()

    def get_run_configuration_path(self, driver: DebuggerDriver, project_path: Path) -> Path:
        filename = f"PHP_Debug_Pilot_{display_name(driver)}.xml"
        return project_path / ".idea" / "runConfigurations" / filename

    def generate_config(self, driver: DebuggerDriver, project_path: Path) -> None:
        config_path = self.get_run_configuration_path(driver, project_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(self.build_run_configuration(driver), encoding="utf-8")
        logger.info("Wrote %s", config_path)

        self._ensure_server_config(project_path)

    def build_run_configuration(self, driver: DebuggerDriver) -> str:
        name = quoteattr(f"Debug Pilot - {display_name(driver)}")
        return (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<component name="ProjectRunConfigurationManager">\n'
            f'  <configuration default="false" name={name} type="PhpRemoteDebug" factoryName="PHP Remote Debug">\n'
            f'    <option name="serverName" value="{SERVER_NAME}" />\n'
            f'    <option name="ide_key" value="{IDE_KEY}" />\n'
            '    <method v="2" />\n'
            "  </configuration>\n"
            "</component>\n"
        )

    def _ensure_server_config(self, project_path: Path) -> None:
        # A user-customized php.xml is never overwritten
        php_xml = project_path / ".idea" / "php.xml"
        if php_xml.exists():
            return
        php_xml.write_text(_SERVER_CONFIG.format(server=SERVER_NAME), encoding="utf-8")
        logger.info("Wrote %s", php_xml)
