import pytest

from schemas import Dimensions, Equipment, Layout, Point, Size, Zone


def make_zone(name, x, y, w, h, zone_type="workspace", **kwargs):
    return Zone(
        id=kwargs.pop("id", f"z-{name.lower().replace(' ', '-')}"),
        name=name,
        type=zone_type,
        position=Point(x=x, y=y),
        size=Size(width=w, height=h),
        **kwargs,
    )


def make_layout(*zones, width=40, height=30, name="Test Lab"):
    return Layout(name=name, dimensions=Dimensions(width=width, height=height), zones=list(zones))


@pytest.fixture
def lab_layout():
    """Wet lab, office and meeting room, priced equipment in two zones."""
    return make_layout(
        make_zone("Wet Lab", 0, 0, 10, 8, "compute", equipment=[
            Equipment(name="Fume Hood", category="safety", unit_price=100, quantity=2),
        ]),
        make_zone("Office", 12, 0, 6, 6, "workspace", equipment=[
            Equipment(name="Desk", category="furniture", unit_price=50, quantity=1),
            "whiteboard",
        ]),
        make_zone("Meeting", 0, 20, 8, 6, "meeting"),
    )
