"""Configuration commands for the kayako CLI."""

from cyclopts import App

from kayako_client.config import get_settings

config_app = App(name="config", help="Manage connection settings")

SECRET_KEYS = ("api_key", "secret_key")


def _display(key: str, value: object) -> str:
    if key in SECRET_KEYS and value:
        return "****"
    return str(value)


@config_app.command
def set(key: str, value: str, global_: bool = False) -> None:
    """Set a setting.

    Args:
        key: Setting name, e.g. base_url, api_key, secret_key, datetime_format
        value: Setting value
        global_: If True, set in global settings. If False, set in local settings.
    """
    settings = get_settings(use_global=global_)
    settings.set(key, value)
    scope = "global" if global_ else "local"
    print(f"Set {key} = {_display(key, value)} ({scope})")


@config_app.command
def unset(key: str, global_: bool = False) -> None:
    """Unset a setting.

    Args:
        key: Setting name
        global_: If True, unset from global settings. If False, unset from local settings.
    """
    settings = get_settings(use_global=global_)
    settings.unset(key)
    scope = "global" if global_ else "local"
    print(f"Unset {key} ({scope})")


@config_app.command
def get(key: str, global_: bool = False) -> None:
    """Print the value of a setting.

    Args:
        key: Setting name
        global_: If True, read global settings only. If False, read with global fallback.
    """
    value = get_settings(use_global=global_).get(key)
    if value is None:
        print(f"{key} is not set")
    else:
        print(f"{key} = {_display(key, value)}")


@config_app.command(name="list")
def list_settings(global_: bool = False) -> None:
    """List all settings, secrets masked.

    Args:
        global_: If True, list global settings only. If False, list merged settings.
    """
    values = get_settings(use_global=global_).list()

    if not values:
        scope = "global" if global_ else "local"
        print(f"No {scope} settings")
        return

    scope = "Global" if global_ else "Current"
    print(f"{scope} settings:\n")
    for key, value in values.items():
        print(f"{key} = {_display(key, value)}")
