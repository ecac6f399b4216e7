"""Main CLI application for Debug Pilot."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from debug_pilot import __version__
from debug_pilot.config.parser import ConfigError, find_settings_file, load_settings
from debug_pilot.config.schemas import DebugSettings
from debug_pilot.core.advisor import InstallationAdvisor
from debug_pilot.core.installer import ExtensionInstaller
from debug_pilot.core.manager import DriverManager, UnknownDriverError, create_driver_manager
from debug_pilot.core.readiness import ExtensionInstallationService
from debug_pilot.drivers.base import (
    DebuggerDriver,
    PhpIniError,
    PhpIniNotWritableError,
    PhpIniReadError,
    read_ini,
)
from debug_pilot.integrators.base import IdeIntegrator
from debug_pilot.utils.environment import EnvironmentDetector
from debug_pilot.utils.markers import list_blocks

# Create the main Typer app
app = typer.Typer(
    name="debug-pilot",
    help="Configure PHP debugging extensions (Xdebug, Pcov)",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()
error_console = Console(stderr=True)

# Set up logger for the debug_pilot package
logger = logging.getLogger("debug_pilot")

RESTART_HINT = "Please restart your PHP process (php-fpm, Apache, or terminal) for the change to take effect."


@dataclass
class Services:
    """The collaborators every command works with."""

    env: EnvironmentDetector
    manager: DriverManager
    advisor: InstallationAdvisor
    installer: ExtensionInstaller
    readiness: ExtensionInstallationService


def build_services(php_binary: str = "php") -> Services:
    """Wire up the detector, drivers, advisor, installer and readiness flow."""
    env = EnvironmentDetector(php_binary=php_binary)
    advisor = InstallationAdvisor(env)
    installer = ExtensionInstaller(env, advisor)
    return Services(
        env=env,
        manager=create_driver_manager(env),
        advisor=advisor,
        installer=installer,
        readiness=ExtensionInstallationService(installer, advisor),
    )


def setup_logging(verbosity: int) -> None:
    """Configure logging based on verbosity level.

    Args:
        verbosity: 0=WARNING, 1=INFO, 2+=DEBUG
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logger.setLevel(level)

    # Only add handler if not already configured
    if not logger.handlers:
        handler = RichHandler(
            console=error_console,
            show_time=verbosity >= 2,
            show_path=verbosity >= 3,
            rich_tracebacks=True,
        )
        handler.setLevel(level)
        logger.addHandler(handler)
    else:
        for h in logger.handlers:
            h.setLevel(level)


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    error_console.print(f"[red]Error:[/red] {escape(message)}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {escape(message)}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]⚠[/yellow] {escape(message)}")


def print_line(line: str) -> None:
    """Print a line of engine output verbatim (no markup)."""
    console.print(line, markup=False, highlight=False)


def print_stream_line(line: str) -> None:
    """Print a line streamed from an install command."""
    console.print(f"  │ {line}", markup=False, highlight=False)


def confirm_prompt(message: str, default: bool) -> bool:
    """Ask a yes/no question on the terminal."""
    return typer.confirm(message, default=default)


def auto_confirm(message: str, default: bool) -> bool:
    """Answer yes to every question (used with --yes)."""
    return True


def get_services(ctx: typer.Context) -> Services:
    php_binary = ctx.obj.get("php_binary", "php") if ctx.obj else "php"
    return build_services(php_binary)


def get_driver(services: Services, name: str) -> DebuggerDriver:
    """Resolve a driver, exiting with an error for unknown names."""
    try:
        return services.manager.resolve_debugger(name.lower())
    except UnknownDriverError as e:
        print_error(str(e))
        raise typer.Exit(1) from e


def print_permission_hint(env: EnvironmentDetector, command: str) -> None:
    """Explain how to get write access to php.ini."""
    if env.is_docker():
        console.print("Ensure your Dockerfile grants write permissions to php.ini.")
    else:
        console.print("Try running the command with sudo:")
        console.print(f"  sudo debug-pilot {command}")


def print_environment(env: EnvironmentDetector) -> None:
    """Print a table describing the detected environment."""
    info = env.get_environment_info()

    table = Table(title="Environment")
    table.add_column("Property", style="cyan")
    table.add_column("Value")
    table.add_row("OS", info["os"])
    table.add_row("PHP", info["php_version"])
    table.add_row("Docker", info["docker"])
    table.add_row("php.ini", info["php_ini"])
    table.add_row("Additional .ini files", info["additional_ini_files"])
    table.add_row("Client Host", info["client_host"])

    ini_path = env.find_php_ini_path()
    if ini_path is not None and Path(ini_path).is_file():
        try:
            blocks = list_blocks(read_ini(Path(ini_path)))
        except PhpIniReadError:
            blocks = []
        table.add_row("Managed blocks", ", ".join(blocks) or "none")

    console.print(table)


@app.callback()
def callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            count=True,
            help="Increase verbosity (-v info, -vv debug)",
        ),
    ] = 0,
    php_binary: Annotated[
        str,
        typer.Option(
            "--php",
            help="PHP executable to inspect",
        ),
    ] = "php",
) -> None:
    """Debug Pilot - configure PHP debugging extensions."""
    setup_logging(verbose)
    ctx.obj = {"php_binary": php_binary}


@app.command()
def version() -> None:
    """Show the Debug Pilot version."""
    console.print(f"debug-pilot {__version__}")


@app.command("env")
def show_env(ctx: typer.Context) -> None:
    """Show the detected OS, Docker, PHP and php.ini information."""
    services = get_services(ctx)
    print_environment(services.env)


@app.command()
def status(ctx: typer.Context) -> None:
    """Show the status of all registered debugger extensions."""
    services = get_services(ctx)
    drivers = services.manager.get_available_debuggers()

    if not drivers:
        print_warning("No debugger drivers are registered.")
        return

    table = Table(title="Extension Status")
    table.add_column("Driver", style="cyan")
    table.add_column("Installed")
    table.add_column("Enabled")
    table.add_column("Configured")
    table.add_column("Directive", style="dim")

    def mark(value: bool) -> str:
        return "[green]✓[/green]" if value else "[red]✗[/red]"

    for driver in drivers:
        has_directive = driver.has_ini_directive()
        if has_directive:
            source = "php.ini"
        else:
            source = driver.additional_ini_file() or "-"

        table.add_row(
            driver.name,
            mark(driver.is_installed() or has_directive),
            mark(driver.is_enabled()),
            mark(driver.is_configured()),
            source,
        )

    console.print(table)


@app.command()
def toggle(
    ctx: typer.Context,
    extension: Annotated[str, typer.Argument(help="Extension name (e.g. xdebug)")],
) -> None:
    """Enable or disable a debugger extension.

    Enabling an extension that is not loaded goes through the install /
    enable flow first.
    """
    services = get_services(ctx)
    driver = get_driver(services, extension)
    name = driver.name

    if not driver.is_enabled():
        result = services.readiness.ensure_extension_ready(driver, print_line, auto_confirm)
        if not result.success:
            print_error(result.message)
            raise typer.Exit(1)

        if not result.requires_restart:
            print_success(f"{name} is already loaded.")
            return

        console.print()
        print_success(f"{name} is now enabled.")
        print_warning(RESTART_HINT)
        return

    console.print(f"Disabling {name}...")
    try:
        driver.set_enabled(False)
    except PhpIniNotWritableError as e:
        print_error(str(e))
        print_permission_hint(services.env, f"toggle {name}")
        raise typer.Exit(1) from e
    except PhpIniError as e:
        print_error(f"Failed to disable {name}: {e}")
        raise typer.Exit(1) from e

    print_success(f"{name} is now disabled.")
    print_warning(RESTART_HINT)


@app.command()
def install(
    ctx: typer.Context,
    extension: Annotated[str, typer.Argument(help="Extension name (xdebug, pcov)")],
) -> None:
    """Install a PHP debugger extension."""
    services = get_services(ctx)
    driver = get_driver(services, extension)
    name = driver.name

    if driver.is_installed():
        print_success(f"The '{name}' extension is already installed and loaded.")
        return

    if not services.installer.can_auto_install():
        print_warning("Auto-installation is not available in this environment.")
        print_line(services.advisor.get_install_instructions(name))
        return

    console.print(f"Installing {name}...")
    console.print(f"Running: [cyan]{services.advisor.get_install_command(name)}[/cyan]")
    console.print()

    result = services.installer.install(name, print_stream_line)

    console.print()
    if result.success:
        print_success(f"{name} installed successfully.")
        return

    print_error(f"Installation failed (exit code {result.exit_code}).")
    if result.error_output:
        print_line(result.error_output)
    raise typer.Exit(1)


def load_base_settings(config_file: Path | None) -> DebugSettings:
    """Load settings from --config, or ./debug-pilot.yaml, or defaults."""
    path = config_file or find_settings_file(Path.cwd())
    if path is None:
        return DebugSettings()

    try:
        settings = load_settings(path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(1) from e

    logger.info("Loaded settings from %s", path)
    return settings


def select_integrator(
    manager: DriverManager, ide: str | None, project_path: Path
) -> IdeIntegrator | None:
    if ide:
        try:
            return manager.resolve_integrator(ide)
        except UnknownDriverError as e:
            print_error(str(e))
            raise typer.Exit(1) from e
    return manager.detect_ide(project_path)


@app.command()
def setup(
    ctx: typer.Context,
    debugger: Annotated[
        str,
        typer.Option("--debugger", "-d", help="Debugger to configure"),
    ] = "xdebug",
    ini: Annotated[
        str | None,
        typer.Option("--ini", help="php.ini to edit (defaults to the detected one)"),
    ] = None,
    host: Annotated[
        str | None,
        typer.Option("--host", help="Client host ('auto' resolves per environment)"),
    ] = None,
    port: Annotated[
        int | None,
        typer.Option("--port", help="Client port"),
    ] = None,
    ide_key: Annotated[
        str | None,
        typer.Option("--ide-key", help="Xdebug IDE key"),
    ] = None,
    xdebug_mode: Annotated[
        str | None,
        typer.Option(
            "--xdebug-mode",
            help="Xdebug modes, comma-separated (debug,develop,coverage,profile,trace)",
        ),
    ] = None,
    ide: Annotated[
        str | None,
        typer.Option("--ide", "-i", help="IDE to configure: vscode, phpstorm, sublime (auto-detected if omitted)"),
    ] = None,
    project_path: Annotated[
        Path | None,
        typer.Option("--project-path", "-p", help="Project root path"),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Settings file (defaults to ./debug-pilot.yaml)"),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Answer yes to install/enable prompts"),
    ] = False,
) -> None:
    """Install or enable a debugger if needed, then write its php.ini block."""
    services = get_services(ctx)
    project_path = Path.cwd() if project_path is None else project_path.resolve()

    print_environment(services.env)
    console.print()

    base = load_base_settings(config_file)
    try:
        settings = base.with_overrides(
            php_ini_path=ini,
            client_host=host,
            client_port=port,
            ide_key=ide_key,
            xdebug_mode=xdebug_mode,
        )
    except ValidationError as e:
        print_error(f"Invalid settings: {e}")
        raise typer.Exit(1) from e

    driver = get_driver(services, debugger)
    name = driver.name

    confirm = auto_confirm if yes else confirm_prompt
    ready = services.readiness.ensure_extension_ready(driver, print_line, confirm)
    if not ready.success:
        print_error(ready.message)
        raise typer.Exit(1)

    console.print(f"Configuring {name}...")
    try:
        driver.configure(settings)
    except PhpIniNotWritableError as e:
        print_error(str(e))
        print_permission_hint(services.env, "setup")
        raise typer.Exit(1) from e
    except PhpIniError as e:
        print_error(f"Failed to configure {name}: {e}")
        raise typer.Exit(1) from e
    print_success(f"{name} configuration written.")

    integrator = select_integrator(services.manager, ide, project_path)
    if integrator is not None:
        console.print(f"Generating {integrator.name} configuration...")
        try:
            integrator.generate_config(driver, project_path)
        except Exception as e:
            print_error(f"Failed to generate {integrator.name} config: {e}")
            raise typer.Exit(1) from e
        print_success(f"{integrator.name} configuration created.")

    console.print()
    if ready.requires_restart:
        print_warning(f"{name} was just installed/enabled and requires a PHP restart.")
        console.print("Restart your PHP process, then run 'debug-pilot verify' to check the setup.")
        return

    result = driver.verify()
    for message in result.messages:
        print_line(f"  {message}")

    if result.passed:
        print_success("All done! Your debug environment is ready.")
    else:
        print_warning("Setup completed with warnings. Review the messages above.")


@app.command()
def verify(
    ctx: typer.Context,
    extension: Annotated[
        str | None,
        typer.Argument(help="Extension to check (defaults to all installed)"),
    ] = None,
) -> None:
    """Run health checks for debugger extensions."""
    services = get_services(ctx)

    if extension:
        drivers = [get_driver(services, extension)]
    else:
        drivers = services.manager.get_installed_debuggers()

    if not drivers:
        print_warning("No debugger extensions are installed.")
        return

    all_passed = True
    for driver in drivers:
        result = driver.verify()
        console.print(f"[bold]{result.driver_name}[/bold]")
        for message in result.messages:
            print_line(f"  {message}")
        if not result.passed:
            all_passed = False

    if not all_passed:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
