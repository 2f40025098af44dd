"""Colored console banners for the stages of model construction."""

ANSI_COLORS = {
    "red": "\033[1m\033[38;5;196m",
    "orange": "\033[1m\033[38;5;208m",
    "green": "\033[1m\033[38;5;46m",
    "reset": "\033[0m",
}


def color_print(color: str, text: str) -> None:
    if color not in ANSI_COLORS or color == "reset":
        raise ValueError(f"Invalid color: {color}")
    print(ANSI_COLORS[color] + text + ANSI_COLORS["reset"])


def print_stage(index: int, title: str) -> None:
    color_print("orange", f"Stage {index}: {title}")


def print_status(ok: bool, success: str, failure: str) -> None:
    color_print("green" if ok else "red", success if ok else failure)
