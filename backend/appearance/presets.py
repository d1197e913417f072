# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Built-in terminal colour themes (xterm.js ``ITheme`` objects)."""

DEFAULT_THEME_NAME = "Default"

PRESET_TERMINAL_THEMES = [
    {
        "name": DEFAULT_THEME_NAME,
        "theme_data": {
            "background": "#1e1e1e",
            "foreground": "#d4d4d4",
            "cursor": "#d4d4d4",
            "selectionBackground": "#264f78",
            "black": "#000000",
            "red": "#cd3131",
            "green": "#0dbc79",
            "yellow": "#e5e510",
            "blue": "#2472c8",
            "magenta": "#bc3fbc",
            "cyan": "#11a8cd",
            "white": "#e5e5e5",
        },
    },
    {
        "name": "Solarized Dark",
        "theme_data": {
            "background": "#002b36",
            "foreground": "#839496",
            "cursor": "#93a1a1",
            "selectionBackground": "#073642",
            "black": "#073642",
            "red": "#dc322f",
            "green": "#859900",
            "yellow": "#b58900",
            "blue": "#268bd2",
            "magenta": "#d33682",
            "cyan": "#2aa198",
            "white": "#eee8d5",
        },
    },
    {
        "name": "Solarized Light",
        "theme_data": {
            "background": "#fdf6e3",
            "foreground": "#657b83",
            "cursor": "#586e75",
            "selectionBackground": "#eee8d5",
            "black": "#073642",
            "red": "#dc322f",
            "green": "#859900",
            "yellow": "#b58900",
            "blue": "#268bd2",
            "magenta": "#d33682",
            "cyan": "#2aa198",
            "white": "#eee8d5",
        },
    },
]

DEFAULT_APPEARANCE = {
    "terminal_font_family": "Consolas, 'Courier New', monospace",
    "terminal_font_size": 14,
    "editor_font_size": 14,
    "page_background_image": None,
}
