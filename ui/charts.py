"""Chart-Bilder für die Menübar (NSImage, gezeichnet mit NSBezierPath)."""

from __future__ import annotations

from ui.render import (
    BAR_CORNER_RADIUS,
    BAR_IMAGE_WIDTH,
    IMAGE_HEIGHT,
    PIE_IMAGE_WIDTH,
    bar_fill_width,
    bar_rects,
    clamp_percent,
    color_for_percent,
    pie_rects,
    pie_slice_angles,
)

BACKGROUND_ALPHA = 0.4
OUTLINE_ALPHA = 0.6
SHADOW_ALPHA = 0.5
SHADOW_BLUR = 3.0


def _ns_color(rgb: tuple[float, float, float], alpha: float = 1.0):
    from AppKit import NSColor  # type: ignore[import-not-found]

    return NSColor.colorWithSRGBRed_green_blue_alpha_(rgb[0], rgb[1], rgb[2], alpha)


def _black(alpha: float):
    from AppKit import NSColor  # type: ignore[import-not-found]

    return NSColor.blackColor().colorWithAlphaComponent_(alpha)


def _inset(rect, amount: float):
    (x, y), (w, h) = rect
    return ((x + amount, y + amount), (w - 2 * amount, h - 2 * amount))


def _draw_image(width: float, draw) -> object:
    """Zeichnet in ein neues NSImage mit Schlagschatten (kein Template)."""
    from AppKit import (  # type: ignore[import-not-found]
        NSGraphicsContext,
        NSImage,
        NSShadow,
    )

    image = NSImage.alloc().initWithSize_((width, IMAGE_HEIGHT))
    image.lockFocus()
    try:
        NSGraphicsContext.saveGraphicsState()
        shadow = NSShadow.alloc().init()
        shadow.setShadowOffset_((0, -1))
        shadow.setShadowBlurRadius_(SHADOW_BLUR)
        shadow.setShadowColor_(_black(SHADOW_ALPHA))
        shadow.set()
        draw()
        NSGraphicsContext.restoreGraphicsState()
    finally:
        image.unlockFocus()
    # Farben sollen sichtbar bleiben, kein Einfärben durch die Menübar
    image.setTemplate_(False)
    return image


def _draw_pie(rect, percent: float) -> None:
    from AppKit import NSBezierPath  # type: ignore[import-not-found]

    (x, y), (w, h) = rect
    center = (x + w / 2, y + h / 2)
    radius = min(w, h) / 2

    background = NSBezierPath.bezierPathWithOvalInRect_(rect)
    _black(BACKGROUND_ALPHA).setFill()
    background.fill()

    if percent > 0:
        start, end = pie_slice_angles(percent)
        slice_path = NSBezierPath.bezierPath()
        slice_path.moveToPoint_(center)
        slice_path.appendBezierPathWithArcWithCenter_radius_startAngle_endAngle_clockwise_(
            center, radius - 0.5, start, end, True
        )
        slice_path.closePath()
        _ns_color(color_for_percent(percent)).setFill()
        slice_path.fill()

    outline = NSBezierPath.bezierPathWithOvalInRect_(_inset(rect, 0.5))
    _black(OUTLINE_ALPHA).setStroke()
    outline.setLineWidth_(1)
    outline.stroke()


def _draw_bar(rect, percent: float) -> None:
    from AppKit import NSBezierPath  # type: ignore[import-not-found]

    (x, y), (w, h) = rect

    background = NSBezierPath.bezierPathWithRoundedRect_xRadius_yRadius_(
        rect, BAR_CORNER_RADIUS, BAR_CORNER_RADIUS
    )
    _black(BACKGROUND_ALPHA).setFill()
    background.fill()

    if percent > 0:
        fill_rect = ((x, y), (bar_fill_width(percent, w), h))
        fill = NSBezierPath.bezierPathWithRoundedRect_xRadius_yRadius_(
            fill_rect, BAR_CORNER_RADIUS, BAR_CORNER_RADIUS
        )
        _ns_color(color_for_percent(percent)).setFill()
        fill.fill()

    outline = NSBezierPath.bezierPathWithRoundedRect_xRadius_yRadius_(
        _inset(rect, 0.5), BAR_CORNER_RADIUS, BAR_CORNER_RADIUS
    )
    _black(OUTLINE_ALPHA).setStroke()
    outline.setLineWidth_(1)
    outline.stroke()


def create_pie_chart_image(session_percent: float | None, weekly_percent: float | None):
    """Zwei Tortendiagramme nebeneinander (Session links, Weekly rechts)."""
    values = (clamp_percent(session_percent), clamp_percent(weekly_percent))

    def draw() -> None:
        for rect, percent in zip(pie_rects(), values):
            _draw_pie(rect, percent)

    return _draw_image(PIE_IMAGE_WIDTH, draw)


def create_bar_chart_image(session_percent: float | None, weekly_percent: float | None):
    """Zwei gestapelte Balken (Session oben, Weekly unten)."""
    values = (clamp_percent(session_percent), clamp_percent(weekly_percent))

    def draw() -> None:
        for rect, percent in zip(bar_rects(), values):
            _draw_bar(rect, percent)

    return _draw_image(BAR_IMAGE_WIDTH, draw)
