import logging

import pytest

from abl2tikz.catalog import OrientedStencil, StencilCatalog, TIKZ_STENCILS, default_catalog
from abl2tikz.config import ConversionConfig
from abl2tikz.geometry import Coordinate, CoordinatePool
from abl2tikz.model import NetTable, Pin, Placed, Placement, ShapeKind, Skipped, Wire
from abl2tikz.placement import PlacementEngine, align_pins, line_crossing_point, nearest_wire_vertex

SCALE = 2.54


def _setup(config=None, catalog=None):
    pool = CoordinatePool()
    nets = NetTable()
    engine = PlacementEngine(catalog or default_catalog(), pool, config or ConversionConfig())
    return pool, nets, engine


def _wire(pool, nets, name, *points):
    coords = [pool.canonicalize(Coordinate(x * SCALE, y * SCALE)) for x, y in points]
    return Wire(nets.get_or_create(name), coords)


def _place(engine, cell, placement, pins, name="X1"):
    result = engine.place("ads_rflib", cell, name, placement, pins)
    assert isinstance(result, Placed)
    return result.component


def test_terminal_snaps_to_nearest_vertex_of_its_net():
    pool, nets, engine = _setup()
    _wire(pool, nets, "VCC", (0, 0), (1, 0))

    resistor = _place(engine, "R", Placement(x=0.5), [Pin(None, None, 1, nets.get("VCC"))], "R1")

    first, second = resistor.pins
    assert first.coord is pool.find(Coordinate(0.0, 0.0))
    assert first.net is nets.get("VCC")
    assert second.net is None
    assert second.coord.x == pytest.approx(1.5 * SCALE)
    assert second.coord in pool


def test_unknown_stencil_is_skipped():
    pool, nets, engine = _setup()
    result = engine.place("ads_foo", "Mystery", "X9", Placement(), [])
    assert isinstance(result, Skipped)
    assert result.instance_name == "X9"
    assert len(pool) == 0


def test_node_without_wire_lands_on_its_origin():
    pool, nets, engine = _setup()
    before = len(pool)

    ground = _place(engine, "GROUND", Placement(x=2, y=-1), [Pin(None, None, 1, nets.get_or_create("gnd"))], "G1")

    (pin,) = ground.pins
    assert pin.coord == Coordinate(2 * SCALE, -SCALE)
    assert pin.coord is pool.find(Coordinate(2 * SCALE, -SCALE))
    assert len(pool) == before + 1
    assert ground.kind is ShapeKind.NODE
    assert ground.angle == 90.0
    assert ground.anchor is pin.coord


def test_node_snaps_to_wire_and_prints_supply_net():
    catalog = StencilCatalog({"VCC": TIKZ_STENCILS["vcc"]})
    pool, nets, engine = _setup(catalog=catalog)
    _wire(pool, nets, "VDD!", (0, 0), (0, 1))

    supply = _place(engine, "VCC", Placement(x=0, y=1.2, angle=90), [Pin(None, None, 1, nets.get("VDD!"))])

    assert supply.pins[0].coord is pool.find(Coordinate(0.0, SCALE))
    assert supply.node_text == "VDD"
    assert supply.angle == 180.0


def test_shared_vertex_yields_identical_coordinates():
    pool, nets, engine = _setup()
    _wire(pool, nets, "mid", (0, 0), (1, 0))
    mid = nets.get("mid")

    left = _place(engine, "R", Placement(x=-1), [Pin(None, None, 2, mid)], "R1")
    right = _place(engine, "R", Placement(x=1.05), [Pin(None, None, 1, mid)], "R2")

    assert left.pins[1].coord is pool.find(Coordinate(0.0, 0.0))
    assert right.pins[0].coord is pool.find(Coordinate(SCALE, 0.0))
    third = _place(engine, "L", Placement(x=0.02, angle=90), [Pin(None, None, 1, mid)], "L1")
    assert third.pins[0].coord is left.pins[1].coord


def test_snap_radius_limits_snapping():
    pool, nets, engine = _setup(ConversionConfig(snap_radius=0.5))
    _wire(pool, nets, "far", (0, 0), (0, 1))

    resistor = _place(engine, "R", Placement(x=3), [Pin(None, None, 1, nets.get("far"))])
    assert resistor.pins[0].coord == Coordinate(3 * SCALE, 0.0)

    pool, nets, engine = _setup(ConversionConfig(snap_radius=None))
    _wire(pool, nets, "far", (0, 0), (0, 1))
    resistor = _place(engine, "R", Placement(x=3), [Pin(None, None, 1, nets.get("far"))])
    assert resistor.pins[0].coord is pool.find(Coordinate(0.0, 0.0))


def test_snapping_ignores_other_nets():
    pool, nets, engine = _setup()
    _wire(pool, nets, "A", (0, 0), (1, 0))
    resistor = _place(engine, "R", Placement(), [Pin(None, None, 1, nets.get_or_create("B"))])
    assert resistor.pins[0].coord == Coordinate(0.0, 0.0)
    assert nets.get("A").pins == []
    assert nets.get("B").pins == [resistor.pins[0]]


def test_path_rotation_and_mirror():
    pool, nets, engine = _setup()
    rotated = _place(engine, "R", Placement(x=1, y=1, angle=90), [])
    assert rotated.pins[0].coord == Coordinate(SCALE, SCALE)
    assert rotated.pins[1].coord == Coordinate(SCALE, 2 * SCALE)

    mirrored = _place(engine, "R", Placement(x=1, y=1, mirror_y=True), [])
    assert mirrored.pins[1].coord == Coordinate(0.0, SCALE)
    assert mirrored.mirror_y


def test_align_pins_orders_by_stencil_and_drops_extras():
    stencil = TIKZ_STENCILS["R"].pins
    second = Pin(None, "P2", 2)
    first = Pin(None, "P1", 1)
    extra = Pin(None, "P9", 9)
    aligned = align_pins(stencil, [extra, second, first])
    assert aligned[0] is first
    assert aligned[1] is second

    partial = align_pins(stencil, [second])
    assert partial[1] is second
    assert partial[0].terminal_index == 1
    assert partial[0].net is None


def test_nearest_wire_vertex_prefers_first_on_tie():
    nets = NetTable()
    net = nets.get_or_create("n")
    Wire(net, [Coordinate(0, 0), Coordinate(2, 0)])
    Wire(net, [Coordinate(1, 1)])
    distance, vertex = nearest_wire_vertex(Coordinate(1, 0), net)
    assert distance == pytest.approx(1.0)
    assert vertex == Coordinate(0, 0)
    assert nearest_wire_vertex(Coordinate(1, 0), None) is None


def test_line_crossing_point():
    coords = [Coordinate(1, 1), Coordinate(1, -1), Coordinate(0, 0.5)]
    crossing = line_crossing_point(coords, 2)
    assert crossing.x == pytest.approx(1.0)
    assert crossing.y == pytest.approx(0.5)
    with pytest.raises(ValueError):
        line_crossing_point(coords[:2], 0)


def _oriented_triangles(engine, stencil, placement, component):
    angle = component.angle
    anatomical = [engine.transform(pin.coord, placement, angle, component.origin) for pin in stencil.pins]
    template = [pin.coord for pin in component.pins]
    return anatomical, template


@pytest.mark.parametrize(
    "placement",
    [
        Placement(x=6),
        Placement(x=1, y=2, angle=90),
        Placement(x=-3, y=1, angle=-90, mirror_y=True),
        Placement(x=2, y=2, angle=30, mirror_x=True),
    ],
)
def test_oriented_line_crossing_points_coincide(placement):
    pool, nets, engine = _setup()
    stencil = default_catalog().lookup("", "BJT_NPN")
    transistor = _place(engine, "BJT_NPN", placement, [], "Q1")

    anatomical, template = _oriented_triangles(engine, stencil, placement, transistor)
    ana_cross = line_crossing_point(anatomical, stencil.anchor_index)
    tpl_cross = line_crossing_point(template, stencil.anchor_index)
    assert tpl_cross.x == pytest.approx(ana_cross.x)
    assert tpl_cross.y == pytest.approx(ana_cross.y)
    assert transistor.anchor.x == pytest.approx(ana_cross.x)
    assert transistor.anchor.y == pytest.approx(ana_cross.y)
    assert transistor.kind is ShapeKind.ORIENTED
    assert transistor.render_name == "npn"


def test_oriented_mirror_x_inverts_both_triangles_around_crossing():
    stencil = default_catalog().lookup("", "BJT_NPN")

    pool, nets, engine = _setup()
    plain_placement = Placement(x=1, y=1)
    plain = _place(engine, "BJT_NPN", plain_placement, [], "Q1")
    plain_ana, plain_tpl = _oriented_triangles(engine, stencil, plain_placement, plain)

    pool, nets, engine = _setup()
    mirrored_placement = Placement(x=1, y=1, mirror_x=True)
    mirrored = _place(engine, "BJT_NPN", mirrored_placement, [], "Q1")
    mirr_ana, mirr_tpl = _oriented_triangles(engine, stencil, mirrored_placement, mirrored)

    plain_cross = line_crossing_point(plain_ana, stencil.anchor_index)
    mirr_cross = line_crossing_point(mirr_ana, stencil.anchor_index)
    assert line_crossing_point(mirr_tpl, stencil.anchor_index).x == pytest.approx(mirr_cross.x)
    assert line_crossing_point(mirr_tpl, stencil.anchor_index).y == pytest.approx(mirr_cross.y)

    for before, after in zip(plain_ana + plain_tpl, mirr_ana + mirr_tpl):
        assert after.x - mirr_cross.x == pytest.approx(before.x - plain_cross.x)
        assert after.y - mirr_cross.y == pytest.approx(-(before.y - plain_cross.y))


def test_oriented_records_leads_from_wire_to_terminal():
    pool, nets, engine = _setup()
    _wire(pool, nets, "n_b", (5, 0), (6, 0))
    base = Pin(None, "B", 2, nets.get("n_b"))
    collector = Pin(None, "C", 1, nets.get_or_create("n_c"))

    transistor = _place(engine, "BJT_NPN", Placement(x=6), [base, collector], "Q1")

    assert len(transistor.leads) == 1
    start, end = transistor.leads[0]
    assert start is pool.find(Coordinate(6 * SCALE, 0.0))
    assert end is transistor.pins[2].coord
    assert end.x == pytest.approx(6.5 * SCALE - 0.84)
    assert transistor.pins[2].name == "B"
    assert transistor.pins[2].net is nets.get("n_b")
    assert transistor.pins[0].net is nets.get("n_c")
    assert transistor.pins[1].net is None
    assert transistor.pins[0].coord.y == pytest.approx(0.77)


def test_place_is_traced_at_debug_level(caplog):
    pool, nets, engine = _setup()
    with caplog.at_level(logging.DEBUG, logger="abl2tikz.placement"):
        engine.place("ads_rflib", "R", "R1", Placement(), [])
    assert any("Entering PlacementEngine.place" in record.getMessage() for record in caplog.records)
    assert any("Exiting PlacementEngine.place" in record.getMessage() for record in caplog.records)


def test_oriented_stencil_with_named_terminals_pairs_template_by_position():
    stencil = OrientedStencil.create(
        TIKZ_STENCILS["npn"],
        [
            Pin(Coordinate(0.5, 0.5), "top", 1),
            Pin(Coordinate(0.5, -0.5), "bottom", 3),
            Pin(Coordinate(0.0, 0.0), "tap", 2),
        ],
        2,
    )
    pool = CoordinatePool()
    nets = NetTable()
    engine = PlacementEngine(StencilCatalog({"Q": stencil}), pool, ConversionConfig())
    tap = Pin(None, "tap", 2, nets.get_or_create("n_b"))

    result = engine.place("lib", "Q", "Q1", Placement(), [tap])

    assert isinstance(result, Placed)
    transistor = result.component
    assert [pin.name for pin in transistor.pins] == ["C", "E", "B"]
    assert [pin.terminal_index for pin in transistor.pins] == [1, 3, 2]
    assert transistor.pins[2].net is nets.get("n_b")
    assert all(pin.coord is pool.find(pin.coord) for pin in transistor.pins)


def test_oriented_unsnapped_terminals_are_interned():
    pool, nets, engine = _setup()
    stencil = default_catalog().lookup("", "BJT_NPN")
    placement = Placement(x=2, y=1)

    transistor = _place(engine, "BJT_NPN", placement, [], "Q1")

    anatomical, _ = _oriented_triangles(engine, stencil, placement, transistor)
    assert transistor.leads == ()
    for coord in anatomical:
        assert pool.find(coord) is not None
