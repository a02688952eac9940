import numpy as np
import pytest

from pypartio import (
    AttributeType,
    ParticlesData,
    ParticlesDataMutable,
    ParticlesInfo,
    ProtocolError,
    SchemaError,
    new_schema,
)


def _schema():
    particles = new_schema()
    position = particles.add_attribute("position", AttributeType.VECTOR, 3)
    life = particles.add_attribute("life", AttributeType.FLOAT, 2)
    pid = particles.add_attribute("id", AttributeType.INT, 1)
    flag = particles.add_attribute("flag", AttributeType.NONE, 2)
    return particles, (position, life, pid, flag)


def test_capabilities():
    particles, _ = _schema()
    assert isinstance(particles, ParticlesInfo)
    assert isinstance(particles, ParticlesData)
    assert isinstance(particles, ParticlesDataMutable)


def test_add_particle_returns_sequential_indices():
    particles, _ = _schema()
    assert [particles.add_particle() for _ in range(4)] == [0, 1, 2, 3]
    assert particles.num_particles() == 4


@pytest.mark.parametrize("n", [1, 2, 7, 100, 1000])
def test_regions_stay_rectangular(n):
    particles, attrs = _schema()
    for expected in range(1, n + 1):
        particles.add_particle()
        for attr in attrs:
            assert particles.region_length(attr) == expected * particles.stride(attr)
            assert len(particles.raw_data(attr)) == expected * particles.stride(attr)


def test_unwritten_values_default_to_zero():
    particles, (position, life, pid, flag) = _schema()
    particles.add_particles(3)
    assert particles.data(position, 2) == (0.0, 0.0, 0.0)
    assert particles.data(life, 0) == (0.0, 0.0)
    assert particles.data(pid, 1) == (0,)
    assert particles.data(flag, 1) == ()
    assert particles.raw_data(position) == bytes(3 * 12)


def test_add_particles_bulk():
    particles, (position, *_rest) = _schema()
    assert particles.add_particles(3) == 0
    assert particles.add_particles(2) == 3
    assert particles.add_particles(0) == 5
    assert particles.num_particles() == 5
    assert particles.region_length(position) == 5 * 12
    with pytest.raises(ValueError):
        particles.add_particles(-1)


def test_addressed_writes_and_reads():
    particles, (position, life, pid, _flag) = _schema()
    particles.add_particles(3)
    particles.write_value_at(position, 1, 2, 4.5)
    particles.write_value_at(life, 2, 0, -1.5)
    particles.write_value_at(pid, 0, 0, 42)
    particles.write_value_at("id", 2, 0, -7)

    assert particles.data(position, 1) == (0.0, 0.0, 4.5)
    assert particles.data(position, 0) == (0.0, 0.0, 0.0)
    assert particles.data(life, 2) == (-1.5, 0.0)
    assert particles.data("id", 0) == (42,)
    assert particles.data(pid, 2) == (0xFFFFFFF9,)


def test_set_data_writes_every_component():
    particles, (position, life, _pid, _flag) = _schema()
    particles.add_particles(2)
    particles.set_data(position, 1, (1.0, 2.0, 3.0))
    assert particles.data(position, 1) == (1.0, 2.0, 3.0)
    with pytest.raises(ProtocolError):
        particles.set_data(life, 0, (1.0,))


def test_values_survive_growth():
    particles, (position, _life, pid, _flag) = _schema()
    for i in range(300):
        index = particles.add_particle()
        particles.set_data(position, index, (float(i), 0.5, -float(i)))
        particles.write_value_at(pid, index, 0, i)
    for i in (0, 1, 63, 64, 65, 299):
        assert particles.data(position, i) == (float(i), 0.5, -float(i))
        assert particles.data(pid, i) == (i,)


def test_addressed_write_bounds():
    particles, (position, life, _pid, flag) = _schema()
    particles.add_particle()
    with pytest.raises(IndexError):
        particles.write_value_at(position, 1, 0, 1.0)
    with pytest.raises(IndexError):
        particles.write_value_at(position, -1, 0, 1.0)
    with pytest.raises(IndexError):
        particles.write_value_at(life, 0, 2, 1.0)
    with pytest.raises(IndexError):
        particles.data(position, 1)
    with pytest.raises(ProtocolError):
        particles.write_value_at(flag, 0, 0, 1.0)


def test_addressed_write_type_mismatch():
    particles, (position, _life, pid, _flag) = _schema()
    particles.add_particle()
    with pytest.raises(ProtocolError):
        particles.write_value_at(pid, 0, 0, 1.5)
    with pytest.raises(ProtocolError):
        particles.write_value_at(position, 0, 0, "1.0")
    with pytest.raises(ProtocolError):
        particles.write_value_at(pid, 0, 0, 2 ** 32)
    assert particles.data(pid, 0) == (0,)


def test_foreign_handle_rejected():
    particles, _ = _schema()
    other = new_schema()
    foreign = other.add_attribute("other", AttributeType.FLOAT, 1)
    particles.add_particle()
    with pytest.raises(SchemaError):
        particles.write_value_at(foreign, 0, 0, 1.0)
    with pytest.raises(SchemaError):
        particles.data("missing", 0)


def test_attribute_array():
    particles, (position, life, pid, flag) = _schema()
    for i in range(4):
        index = particles.add_particle()
        particles.set_data(position, index, (i, i + 0.5, i + 0.25))
        particles.set_data(life, index, (-1.0, 2.0))
        particles.set_data(pid, index, (10 * i,))

    positions = particles.attribute_array(position)
    assert positions.shape == (4, 3)
    assert positions.dtype == np.float32
    np.testing.assert_allclose(positions[2], [2.0, 2.5, 2.25])

    ids = particles.attribute_array("id")
    assert ids.dtype == np.uint32
    assert ids[:, 0].tolist() == [0, 10, 20, 30]

    assert particles.attribute_array(flag).shape == (4, 0)

    # the array is a copy
    positions[0, 0] = 99.0
    assert particles.data(position, 0)[0] == 0.0


def test_attribute_array_empty():
    particles, (position, _life, _pid, _flag) = _schema()
    assert particles.attribute_array(position).shape == (0, 3)


def test_repr_lists_schema():
    particles, _ = _schema()
    text = repr(particles)
    assert "position:VECTOR[3]" in text
    assert "particles=0" in text
