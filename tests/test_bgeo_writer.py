import io
import struct

import pytest

from pypartio import (
    AttributeType,
    BgeoWriter,
    EncodeSettings,
    ErrorCode,
    SchemaError,
    UnsupportedFeatureError,
    encode_bytes,
    new_schema,
)

HEADER_SIZE = 41


def _header(data):
    assert data[:4] == b"Bgeo"
    assert data[4:5] == b"V"
    return struct.unpack_from(">9I", data, 5)


def _expected_particle(i):
    return (struct.pack(">4f", 0.1 * i, 0.1 * (i + 1), 0.1 * (i + 2), 1.0)
            + struct.pack(">2f", -1.2 + i, 10.0)
            + struct.pack(">I", i))


def test_header_fields(particles):
    data = encode_bytes(particles)
    (version, n_points, n_prims, n_point_groups, n_prim_groups,
     n_point_attrib, n_vertex_attrib, n_prim_attrib, n_attrib) = _header(data)
    assert version == 5
    assert n_points == 5
    assert n_prims == n_point_groups == n_prim_groups == 0
    assert n_point_attrib == 2
    assert n_vertex_attrib == n_prim_attrib == 0
    assert n_attrib == 0


def test_concrete_scenario_bytes(particles):
    data = encode_bytes(particles)

    expected = (
        b"Bgeo" + b"V" + struct.pack(">I", 5)
        + struct.pack(">8I", 5, 0, 0, 0, 2, 0, 0, 0)
        + b"life" + struct.pack(">HI", 2, 0) + struct.pack(">2I", 0, 0)
        + b"id" + struct.pack(">HI", 1, 1) + struct.pack(">I", 0)
        + b"".join(_expected_particle(i) for i in range(5))
        + b"\x00\xff"
    )
    assert data == expected
    assert len(data) == 213


def test_first_particle_block(particles):
    data = encode_bytes(particles)
    start = HEADER_SIZE + len(b"life") + 6 + 8 + len(b"id") + 6 + 4
    assert data[start:start + 28] == (
        struct.pack(">4f", 0.0, 0.1, 0.2, 1.0)
        + struct.pack(">2f", -1.2, 10.0)
        + struct.pack(">I", 0)
    )


def test_trailer(particles):
    assert encode_bytes(particles)[-2:] == b"\x00\xff"


def test_encode_returns_byte_count(particles):
    stream = io.BytesIO()
    size = BgeoWriter(EncodeSettings(verbose=False)).encode(particles, stream)
    assert size == len(stream.getvalue()) == 213


def test_encoding_is_idempotent(particles):
    first = encode_bytes(particles)
    second = encode_bytes(particles)
    assert first == second
    # encoding does not mutate the set
    assert particles.num_particles() == 5
    assert particles.is_complete()


@pytest.mark.parametrize("z", [0.0, -3.5, 123.25, 1e30])
def test_position_homogeneous_coordinate(z):
    particles = new_schema([("position", AttributeType.VECTOR, 3)])
    particles.add_particle()
    particles.write_values([1.0, 2.0, z])
    data = encode_bytes(particles)
    block = data[HEADER_SIZE:HEADER_SIZE + 16]
    assert struct.unpack(">4f", block) == (1.0, 2.0, pytest.approx(z, rel=1e-6), 1.0)
    assert len(data) == HEADER_SIZE + 16 + 2


def test_position_need_not_be_first():
    particles = new_schema([
        ("id", AttributeType.INT, 1),
        ("position", AttributeType.VECTOR, 3),
    ])
    particles.add_particle()
    particles.write_values([3, 1.0, 2.0, 4.0])
    data = encode_bytes(particles)
    defs = b"id" + struct.pack(">HI", 1, 1) + struct.pack(">I", 0)
    assert data[HEADER_SIZE:HEADER_SIZE + len(defs)] == defs
    body = data[HEADER_SIZE + len(defs):-2]
    assert body == struct.pack(">I", 3) + struct.pack(">4f", 1.0, 2.0, 4.0, 1.0)


def test_missing_position_fails():
    particles = new_schema([("life", AttributeType.FLOAT, 1)])
    particles.add_particle()
    stream = io.BytesIO()
    with pytest.raises(SchemaError) as excinfo:
        BgeoWriter(EncodeSettings(verbose=False)).encode(particles, stream)
    assert excinfo.value.code == ErrorCode.SCH001
    assert stream.getvalue() == b""


def test_position_must_be_float_with_three_components():
    particles = new_schema([("position", AttributeType.INT, 3)])
    with pytest.raises(SchemaError):
        encode_bytes(particles)
    particles = new_schema([("position", AttributeType.VECTOR, 2)])
    with pytest.raises(SchemaError):
        encode_bytes(particles)


def test_fixed_attributes_unsupported(particles):
    particles.add_fixed_attribute("gravity", AttributeType.VECTOR, 3)
    with pytest.raises(UnsupportedFeatureError) as excinfo:
        encode_bytes(particles)
    assert excinfo.value.code == ErrorCode.UNS002
    assert isinstance(excinfo.value, NotImplementedError)


def test_empty_particle_set():
    particles = new_schema([("position", AttributeType.VECTOR, 3)])
    data = encode_bytes(particles)
    assert _header(data)[1] == 0
    assert data == (b"BgeoV" + struct.pack(">I", 5) + struct.pack(">8I", 0, 0, 0, 0, 0, 0, 0, 0)
                    + b"\x00\xff")


def test_vector_attribute_definition():
    particles = new_schema([
        ("position", AttributeType.VECTOR, 3),
        ("v", AttributeType.VECTOR, 3),
    ])
    particles.add_particle()
    particles.write_values([0.0, 0.0, 0.0, 1.0, -1.0, 0.5])
    data = encode_bytes(particles)
    defs = b"v" + struct.pack(">HI", 3, 5) + struct.pack(">3I", 0, 0, 0)
    assert data[HEADER_SIZE:HEADER_SIZE + len(defs)] == defs
    body = data[HEADER_SIZE + len(defs):-2]
    assert body == struct.pack(">4f", 0.0, 0.0, 0.0, 1.0) + struct.pack(">3f", 1.0, -1.0, 0.5)


def test_indexed_string_attribute():
    particles = new_schema([
        ("position", AttributeType.VECTOR, 3),
        ("name", AttributeType.INDEXEDSTR, 1),
    ])
    particles.add_particle()
    particles.write_values([0.0, 0.0, 0.0, 2])
    data = encode_bytes(particles)
    defs = b"name" + struct.pack(">I", 4)
    assert data[HEADER_SIZE:HEADER_SIZE + len(defs)] == defs
    assert data[HEADER_SIZE + len(defs) + 16:-2] == struct.pack(">I", 2)


def test_none_attribute_has_definition_but_no_data():
    particles = new_schema([
        ("position", AttributeType.VECTOR, 3),
        ("flag", AttributeType.NONE, 2),
    ])
    particles.add_particle()
    particles.write_values([1.0, 2.0, 3.0])
    data = encode_bytes(particles)
    defs = b"flag" + struct.pack(">HI", 2, 0) + struct.pack(">2I", 0, 0)
    assert data[HEADER_SIZE:HEADER_SIZE + len(defs)] == defs
    assert len(data) == HEADER_SIZE + len(defs) + 16 + 2


def test_u16_name_framing(particles):
    data = encode_bytes(particles, EncodeSettings(name_framing="u16", verbose=False))
    defs = (struct.pack(">H", 4) + b"life" + struct.pack(">HI", 2, 0) + struct.pack(">2I", 0, 0)
            + struct.pack(">H", 2) + b"id" + struct.pack(">HI", 1, 1) + struct.pack(">I", 0))
    assert data[HEADER_SIZE:HEADER_SIZE + len(defs)] == defs
    assert len(data) == 213 + 4


def test_non_ascii_names_are_utf8():
    particles = new_schema([
        ("position", AttributeType.VECTOR, 3),
        ("温度", AttributeType.FLOAT, 1),
    ])
    data = encode_bytes(particles)
    name = "温度".encode("utf-8")
    assert data[HEADER_SIZE:HEADER_SIZE + len(name)] == name


def test_int_values_are_written_unsigned():
    particles = new_schema([
        ("position", AttributeType.VECTOR, 3),
        ("id", AttributeType.INT, 2),
    ])
    particles.add_particle()
    particles.write_values([0.0, 0.0, 0.0, 3_000_000_000, -1])
    data = encode_bytes(particles)
    assert struct.pack(">I", 3_000_000_000) + struct.pack(">I", 0xFFFFFFFF) in data
    assert data[-10:-2] == struct.pack(">2I", 3_000_000_000, 0xFFFFFFFF)
