"""Example pipeline: read an ADS ABL export and print the CircuiTikZ document."""

import logging
from pathlib import Path

from abl2tikz import Schematic, generate_tikz_document, load_view

SOURCE = Path(__file__).resolve().parent / "rc_lowpass.xml"


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(name)s:%(message)s")
    view = load_view(SOURCE, cell_name="rc_lowpass")
    schematic = Schematic.from_view(view)

    print("Components:")
    for component in schematic.components:
        pins = ", ".join(str(pin.coord) for pin in component.pins)
        print(f"  {component.label}: {component.render_name} [{pins}]")
    for skipped in schematic.skipped:
        print(f"  skipped {skipped}")

    print()
    print(generate_tikz_document(schematic))


if __name__ == "__main__":
    main()
