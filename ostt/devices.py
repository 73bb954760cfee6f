"""Listing the available audio input devices."""

from __future__ import annotations

from ostt.audio import list_input_devices

__all__ = ["handle_list_devices"]

LOGO = (" ┏┓┏╋╋ ", " ┗┛┛┗┗ ")


def handle_list_devices() -> list[str]:
    """Print every audio input device with its index and return their names."""
    devices = list_input_devices()
    if not devices:
        print("No audio input devices found on this system.")
        return []

    print()
    for line in LOGO:
        print(line)
    print()
    print("Available audio input devices:")
    print()

    for index, name in enumerate(devices):
        print(f"  ID: {index}")
        print(f"    Name: {name or 'Unknown'}")
        print("    Config:")
        print()
    return devices