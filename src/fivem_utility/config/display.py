"""Rich rendering of a parsed FivemConfig (coloured hostname, masked secrets, tree-drawn lists)."""

from __future__ import annotations

from rich.console import Console
from rich.text import Text

from fivem_utility.config.parser import ConfigError, FivemConfig
from fivem_utility.helpers import mask_secret

# FiveM ^N colour codes; unlisted digits render white.
HOSTNAME_COLOURS: dict[int, str] = {
    0: "white",
    1: "red",
    2: "green",
    3: "yellow",
    4: "blue",
    5: "bright_blue",
    6: "magenta",
}


def render_hostname(hostname: str) -> Text:
    """Turn a hostname with ^N colour codes into styled Text. Raises ConfigError on ^ + non-digit."""
    text = Text()
    colour = 0
    chunk: list[str] = []
    escaped = False
    for ch in hostname:
        if ch == "^":
            text.append("".join(chunk), style=HOSTNAME_COLOURS.get(colour, "white"))
            chunk = []
            escaped = True
        elif escaped:
            if ch not in "0123456789":
                msg = "A colour in the hostname is invalid!"
                raise ConfigError(msg)
            colour = int(ch)
            escaped = False
        else:
            chunk.append(ch)
    text.append("".join(chunk), style=HOSTNAME_COLOURS.get(colour, "white"))
    return text


def tree_lines(items: list[str]) -> list[str]:
    """Prefix items with tree connectors: ├─ for all but the last, └─ for the last."""
    return [
        f"   {'└─' if i == len(items) - 1 else '├─'} {item}" for i, item in enumerate(items)
    ]


def print_config(config: FivemConfig, console: Console | None = None) -> None:
    """Print the config summary. Raises ConfigError if the hostname has a bad colour code."""
    con = console or Console()
    hostname = render_hostname(config.hostname)
    hostname.stylize("italic")

    con.print(Text.assemble(("FiveM Server Configuration", "underline"), ": ", hostname))
    fields = [
        ("Script Hook", "  ", "Allowed" if config.allow_scripthook else "Disabled"),
        ("Rcon Password", "", mask_secret(config.rcon_password)),
        ("License Key", "  ", mask_secret(config.license_key)),
        ("Server Icon", "  ", config.server_icon),
        ("Max Clients", "  ", str(config.max_clients)),
    ]
    for label, pad, value in fields:
        con.print(Text.assemble("  ", (label, "bold"), f": {pad}", value))

    sections = [
        ("Convars", [f"{k} = {v}" for k, v in config.convars.items()]),
        ("Replicated Convars", [f"{k} = {v}" for k, v in config.convars_replicated.items()]),
        ("Resources", list(config.resources)),
    ]
    for title, items in sections:
        if not items:
            continue
        con.print(Text.assemble("  ", (title, "bold"), ":"))
        for line in tree_lines(items):
            con.print(Text(line))
