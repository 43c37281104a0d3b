"""Theme colors and color utilities for the UI."""


class PuzzleColors:
    """Dark circuit-board palette."""

    BG_TOP = "#102027"
    BG_BOTTOM = "#1c313a"

    PRIMARY = "#26a69a"
    PRIMARY_LIGHT = "#64d8cb"
    PRIMARY_DARK = "#00766c"

    BULB_ON = "#ffd54f"
    BULB_GLOW = "#fff59d"
    BULB_OFF = "#37474f"

    SWITCH_ON = "#66bb6a"
    SWITCH_OFF = "#546e7a"
    SWITCH_LOCKED = "#263238"

    STAR = "#ffca28"
    DANGER = "#ef5350"

    CARD_BG = "rgba(255, 255, 255, 0.08)"
    CARD_BG_HOVER = "rgba(255, 255, 255, 0.16)"

    TEXT_PRIMARY = "#eceff1"
    TEXT_SECONDARY = "#b0bec5"
    TEXT_MUTED = "#78909c"


def blend_hex(a: str, b: str, t: float) -> str:
    """Blend two #RRGGBB colors. t=0 -> a, t=1 -> b."""
    try:
        a = a.strip()
        b = b.strip()
        if not (a.startswith("#") and b.startswith("#") and len(a) == 7 and len(b) == 7):
            return a
        t = max(0.0, min(1.0, float(t)))
        ar, ag, ab = int(a[1:3], 16), int(a[3:5], 16), int(a[5:7], 16)
        br, bg, bb = int(b[1:3], 16), int(b[3:5], 16), int(b[5:7], 16)
        r = int(ar + (br - ar) * t)
        g = int(ag + (bg - ag) * t)
        bl = int(ab + (bb - ab) * t)
        return f"#{r:02X}{g:02X}{bl:02X}"
    except ValueError:
        return a


def budget_color(used: float) -> str:
    """Color for a budget bar that is *used* (0..1) drained."""
    return blend_hex(PuzzleColors.SWITCH_ON, PuzzleColors.DANGER, used)
