"""
Drum fill diagram

Front view of the drum with its fill level, as SVG and PNG. Only needs the
fill percentage and the drum's height/diameter; nothing is recomputed here.

- Drum drawn to scale inside a fixed drawing box.
- Fill (cement + people) rises to min(percent, 100) of the drum height,
  slightly narrower than the drum walls.
- Above 100% the fill turns red and an overflow band sits on the rim
  (1.1× drum width, 0.2× drum height).
"""

from __future__ import annotations

from typing import Dict, List, Optional
from xml.sax.saxutils import escape

DEFAULT_DRUM_HEIGHT = 100.0
DEFAULT_DRUM_DIAMETER = 60.0

# Visual parameters (px)
DRAW_MAX_W = 240
DRAW_MAX_H = 300
MARGIN = 20
TITLE_H = 20
LABEL_H = 20
FILL_INSET = 0.95
OVERFLOW_WIDTH = 1.1
OVERFLOW_HEIGHT = 0.2

COLOR_DRUM = "#888888"
COLOR_DRUM_BG = "#F4F4F4"
COLOR_FILL = "#00FF88"
COLOR_OVERFLOW = "#FF0000"
COLOR_TEXT = "#000000"


def build_geometry(
    percent_filled: float,
    drum_height: Optional[float] = None,
    drum_diameter: Optional[float] = None,
) -> Dict:
    """Pixel rectangles for the diagram: canvas, drum, fill and (optional) overflow.

    Rectangles are dicts with x, y, w, h (top-left origin).
    """
    height = float(drum_height or DEFAULT_DRUM_HEIGHT)
    diameter = float(drum_diameter or DEFAULT_DRUM_DIAMETER)
    pct = max(0.0, float(percent_filled or 0.0))
    overflow = pct > 100

    scale = min(DRAW_MAX_W / diameter, DRAW_MAX_H / height)
    drum_w = diameter * scale
    drum_h = height * scale
    # Headroom above the rim is always reserved so the canvas size does not depend on the result
    headroom = DRAW_MAX_H * OVERFLOW_HEIGHT
    canvas_w = DRAW_MAX_W * OVERFLOW_WIDTH + 2 * MARGIN
    canvas_h = MARGIN + TITLE_H + headroom + DRAW_MAX_H + LABEL_H + MARGIN

    cx = canvas_w / 2
    bottom = MARGIN + TITLE_H + headroom + DRAW_MAX_H
    drum = {"x": cx - drum_w / 2, "y": bottom - drum_h, "w": drum_w, "h": drum_h}

    fill_h = drum_h * min(pct, 100.0) / 100.0
    fill_w = drum_w * FILL_INSET
    fill = {"x": cx - fill_w / 2, "y": bottom - fill_h, "w": fill_w, "h": fill_h}

    band = None
    if overflow:
        band_w = drum_w * OVERFLOW_WIDTH
        band_h = drum_h * OVERFLOW_HEIGHT
        band = {"x": cx - band_w / 2, "y": drum["y"] - band_h, "w": band_w, "h": band_h}

    return {
        "width": canvas_w,
        "height": canvas_h,
        "percent_filled": pct,
        "overflow": overflow,
        "drum": drum,
        "fill": fill,
        "overflow_band": band,
        "fill_color": COLOR_OVERFLOW if overflow else COLOR_FILL,
        "label_y": bottom + LABEL_H,
        "drum_height": height,
        "drum_diameter": diameter,
    }


def _label(geom: Dict) -> str:
    pct = geom["percent_filled"]
    text = f"{pct:.1f}% filled | drum {geom['drum_diameter']:g} x {geom['drum_height']:g} cm"
    if geom["overflow"]:
        text += " | OVERFLOW"
    return text


# ---------------- SVG/PNG rendering ----------------
def render_svg(
    percent_filled: float,
    drum_height: Optional[float] = None,
    drum_diameter: Optional[float] = None,
    title: str = "Drum Fill",
) -> str:
    geom = build_geometry(percent_filled, drum_height, drum_diameter)

    def rect(r: Dict, fill: str, stroke: str = "none", opacity: float = 1.0) -> str:
        return (
            f'<rect x="{r["x"]:.1f}" y="{r["y"]:.1f}" width="{r["w"]:.1f}" height="{r["h"]:.1f}" '
            f'fill="{fill}" fill-opacity="{opacity}" stroke="{stroke}" stroke-width="2"/>'
        )

    parts: List[str] = [f'<svg xmlns="http://www.w3.org/2000/svg" width="{geom["width"]:.0f}" height="{geom["height"]:.0f}">']
    parts.append(f'<text x="{MARGIN}" y="{MARGIN}" font-size="14" font-weight="bold">{escape(title)}</text>')
    parts.append(rect(geom["drum"], COLOR_DRUM_BG))
    if geom["fill"]["h"] > 0:
        parts.append(rect(geom["fill"], geom["fill_color"], opacity=0.8))
    if geom["overflow_band"]:
        parts.append(rect(geom["overflow_band"], COLOR_OVERFLOW, opacity=0.8))
    # Outline last so the walls stay visible over the fill
    parts.append(rect(geom["drum"], "none", stroke=COLOR_DRUM))
    parts.append(
        f'<text x="{geom["width"] / 2:.1f}" y="{geom["label_y"]:.1f}" font-size="12" '
        f'text-anchor="middle" fill="{COLOR_TEXT}">{escape(_label(geom))}</text>'
    )
    parts.append("</svg>")
    return "".join(parts)


def render_png(
    percent_filled: float,
    out_path: str,
    drum_height: Optional[float] = None,
    drum_diameter: Optional[float] = None,
    title: str = "Drum Fill",
) -> bool:
    try:
        import cairosvg  # type: ignore
        svg_str = render_svg(percent_filled, drum_height, drum_diameter, title=title)
        cairosvg.svg2png(bytestring=svg_str.encode("utf-8"), write_to=out_path)
        return True
    except Exception:
        pass
    try:
        from PIL import Image, ImageDraw, ImageFont  # type: ignore
    except Exception:
        return False

    geom = build_geometry(percent_filled, drum_height, drum_diameter)
    img = Image.new("RGB", (int(geom["width"]), int(geom["height"])), "white")
    d = ImageDraw.Draw(img)
    try:
        font = ImageFont.load_default()
    except Exception:
        font = None

    def draw_rect(r: Dict, fill_color: Optional[str], outline: Optional[str] = None) -> None:
        d.rectangle(
            [int(r["x"]), int(r["y"]), int(r["x"] + r["w"]), int(r["y"] + r["h"])],
            outline=outline,
            fill=fill_color,
            width=2,
        )

    if font:
        d.text((MARGIN, MARGIN - 12), title, fill=COLOR_TEXT, font=font)
    draw_rect(geom["drum"], COLOR_DRUM_BG)
    if geom["fill"]["h"] > 0:
        draw_rect(geom["fill"], geom["fill_color"])
    if geom["overflow_band"]:
        draw_rect(geom["overflow_band"], COLOR_OVERFLOW)
    draw_rect(geom["drum"], None, outline=COLOR_DRUM)
    if font:
        d.text((MARGIN, geom["label_y"] - 10), _label(geom), fill=COLOR_TEXT, font=font)

    img.save(out_path)
    return True
