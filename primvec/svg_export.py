"""SVG export of accepted steps."""
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Iterable, Sequence, Union

from primvec.raster import scaled_size

SVGNS = "http://www.w3.org/2000/svg"

ET.register_namespace("", SVGNS)


def format_color(rgb: Sequence[int]) -> str:
    """
    Format an RGB triple as an SVG color.

    Args:
        rgb: RGB values in 0..255

    Returns:
        Color string like "rgb(12, 34, 56)"
    """
    r, g, b = [int(min(255, max(0, c))) for c in rgb[:3]]
    return f"rgb({r}, {g}, {b})"


def format_alpha(alpha: float) -> str:
    return f"{alpha:.2f}"


def format_number(x: float) -> str:
    """Format a number without a trailing '.0'."""
    if float(x).is_integer():
        return str(int(x))
    return f"{x:g}"


class SvgDocument:
    """Node factory for SVG elements."""

    def create_element(self, tag: str, **attrs) -> ET.Element:
        node = ET.Element(f"{{{SVGNS}}}{tag}")
        for name, value in attrs.items():
            node.set(name.replace("_", "-"), _attr_value(value))
        return node


def _attr_value(value) -> str:
    if isinstance(value, (int, float)):
        return format_number(value)
    return str(value)


def build_svg(
    steps: Iterable,
    width: int,
    height: int,
    fill: Sequence[int],
    document: SvgDocument,
    view_size: int = None,
) -> ET.Element:
    """
    Assemble the SVG for a composition.

    Args:
        steps: Accepted steps, in acceptance order
        width: Canvas width in compute pixels
        height: Canvas height in compute pixels
        fill: Background RGB color
        document: Export document used to create nodes
        view_size: Longest side of the rendered SVG (default: canvas size)

    Returns:
        Root svg element
    """
    if view_size is None:
        view_width, view_height = width, height
    else:
        view_width, view_height = scaled_size(width, height, view_size)

    svg = document.create_element(
        "svg",
        viewBox=f"0 0 {width} {height}",
        width=view_width,
        height=view_height,
    )
    svg.append(document.create_element(
        "rect", x=0, y=0, width=width, height=height, fill=format_color(fill)
    ))
    for step in steps:
        svg.append(step.to_svg())

    return svg


def svg_to_string(svg: ET.Element) -> str:
    return ET.tostring(svg, encoding="unicode")


def save_svg(svg_string: str, output_path: Union[str, Path]) -> None:
    """
    Save SVG string to file.

    Args:
        svg_string: SVG content
        output_path: Output file path
    """
    with open(output_path, 'w', encoding='utf-8') as f:
        f.write('<?xml version="1.0" encoding="UTF-8"?>\n')
        f.write(svg_string)
