"""Clipboard access through Tk, the same way the desktop views copy text.

tkinter is imported lazily so headless test runs can import this module.
"""

from __future__ import annotations


class ClipboardError(RuntimeError):
    pass


def copy_to_clipboard(text: str) -> None:
    """Place text on the system clipboard.

    A hidden Tk root is created just for the copy. update() hands the
    selection to the window system before the root goes away.
    """
    try:
        import tkinter as tk
    except ImportError as exc:
        raise ClipboardError("tkinter is not available") from exc

    try:
        root = tk.Tk()
    except tk.TclError as exc:
        raise ClipboardError(f"No display available for clipboard: {exc}") from exc
    try:
        root.withdraw()
        root.clipboard_clear()
        root.clipboard_append(text)
        root.update()
    except tk.TclError as exc:
        raise ClipboardError(str(exc)) from exc
    finally:
        root.destroy()
