import pytest

from pypartio import AttributeType, new_schema


def make_data(count=5):
    """position(VECTOR,3), life(FLOAT,2), id(INT,1) with ``count`` particles."""
    particles = new_schema()
    particles.add_attribute("position", AttributeType.VECTOR, 3)
    particles.add_attribute("life", AttributeType.FLOAT, 2)
    particles.add_attribute("id", AttributeType.INT, 1)
    for i in range(count):
        index = particles.add_particle()
        # position
        particles.write_value(0.1 * (i + 0))
        particles.write_value(0.1 * (i + 1))
        particles.write_value(0.1 * (i + 2))
        # life
        particles.write_value(-1.2 + i)
        particles.write_value(10.0)
        # id
        particles.write_value(index)
    return particles


@pytest.fixture
def particles():
    return make_data()


@pytest.fixture
def quiet_settings():
    from pypartio import EncodeSettings
    return EncodeSettings(verbose=False)


@pytest.fixture
def make_particles():
    return make_data
