# -*- coding: utf-8 -*-
"""
pypartio - Particle containers

Abstracts the particle interface from the data representation through three
capability sets:

- ParticlesInfo        - number of particles and attribute definitions
- ParticlesData        - read only access to all particle data
- ParticlesDataMutable - read/write access to all particle data

ParticlesSimple implements all three with a columnar layout: one growable
byte region per attribute, sized ``num_particles * stride``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Tuple, Union

import numpy as np

from .errors import ErrorCode, ProtocolError, SchemaError
from .formats.attribute_codec import pack_into, storage_width, unpack_from
from .schema import AttributeType, FixedAttribute, ParticleAttribute
from .validator import check_attribute_definition

AttributeRef = Union[ParticleAttribute, str]

_NUMPY_DTYPES = {
    AttributeType.VECTOR: np.dtype("<f4"),
    AttributeType.FLOAT: np.dtype("<f4"),
    AttributeType.INT: np.dtype("<u4"),
    AttributeType.INDEXEDSTR: np.dtype("<i4"),
}


# =========================
# Capability interfaces
# =========================

class ParticlesInfo(ABC):
    """Number of particles and attribute definitions."""

    @abstractmethod
    def num_particles(self) -> int: ...

    @abstractmethod
    def num_attributes(self) -> int: ...

    @abstractmethod
    def num_fixed_attributes(self) -> int: ...

    @abstractmethod
    def attribute_info(self, name: str) -> ParticleAttribute: ...

    @abstractmethod
    def attribute_info_by_index(self, index: int) -> ParticleAttribute: ...

    @abstractmethod
    def fixed_attribute_info(self, name: str) -> FixedAttribute: ...

    @abstractmethod
    def fixed_attribute_info_by_index(self, index: int) -> FixedAttribute: ...

    def has_attribute(self, name: str) -> bool:
        try:
            self.attribute_info(name)
        except SchemaError:
            return False
        return True

    def attributes(self) -> Tuple[ParticleAttribute, ...]:
        """Attributes in ordinal order."""
        return tuple(self.attribute_info_by_index(i) for i in range(self.num_attributes()))

    def fixed_attributes(self) -> Tuple[FixedAttribute, ...]:
        return tuple(self.fixed_attribute_info_by_index(i) for i in range(self.num_fixed_attributes()))


class ParticlesData(ParticlesInfo):
    """Read only access to all particle data."""

    @abstractmethod
    def stride(self, attr: AttributeRef) -> int: ...

    @abstractmethod
    def data(self, attr: AttributeRef, particle: int) -> tuple: ...

    @abstractmethod
    def raw_data(self, attr: AttributeRef) -> bytes: ...

    @abstractmethod
    def is_complete(self) -> bool: ...

    def attribute_array(self, attr: AttributeRef) -> np.ndarray:
        """
        Copy of one attribute's values as a ``(num_particles, count)`` array.

        float32 for FLOAT/VECTOR, uint32 for INT, int32 for INDEXEDSTR. NONE attributes
        hold no values and yield an empty ``(num_particles, 0)`` array.
        """
        info = attr if isinstance(attr, ParticleAttribute) else self.attribute_info(attr)
        dtype = _NUMPY_DTYPES.get(info.type)
        if dtype is None:
            return np.zeros((self.num_particles(), 0), dtype=np.float32)
        if self.num_particles() == 0:
            return np.zeros((0, info.count), dtype=dtype)
        flat = np.frombuffer(self.raw_data(info), dtype=dtype)
        return flat.reshape(self.num_particles(), info.count).astype(dtype.type)


class ParticlesDataMutable(ParticlesData):
    """Read/write access to all particle data."""

    @abstractmethod
    def add_attribute(self, name: str, ptype: AttributeType, count: int) -> ParticleAttribute: ...

    @abstractmethod
    def add_fixed_attribute(self, name: str, ptype: AttributeType, count: int) -> FixedAttribute: ...

    @abstractmethod
    def add_particle(self) -> int: ...

    @abstractmethod
    def add_particles(self, count: int) -> int: ...

    @abstractmethod
    def write_value(self, value) -> None: ...

    @abstractmethod
    def write_value_at(self, attr: AttributeRef, particle: int, component: int, value) -> None: ...

    def write_values(self, values: Iterable) -> None:
        """Sequential write of several components."""
        for value in values:
            self.write_value(value)

    def set_data(self, attr: AttributeRef, particle: int, values) -> None:
        """Addressed write of every component of one attribute for one particle."""
        info = attr if isinstance(attr, ParticleAttribute) else self.attribute_info(attr)
        values = list(values)
        if len(values) != info.count:
            raise ProtocolError(
                f"attribute '{info.name}' has {info.count} components, got {len(values)} values"
            )
        for component, value in enumerate(values):
            self.write_value_at(info, particle, component, value)


# =========================
# Columnar storage
# =========================

class _AttributeRegion:
    """
    Growable byte region with a logical length.

    Capacity doubles when exhausted; bytes past the logical length are always
    zero, so growing only moves the length.
    """

    __slots__ = ("stride", "buffer", "_length")

    def __init__(self, stride: int):
        self.stride = stride
        self.buffer = bytearray()
        self._length = 0

    def __len__(self) -> int:
        return self._length

    def grow(self, nbytes: int) -> None:
        needed = self._length + nbytes
        capacity = len(self.buffer)
        if needed > capacity:
            new_capacity = max(needed, capacity * 2)
            self.buffer.extend(bytes(new_capacity - capacity))
        self._length = needed

    def to_bytes(self) -> bytes:
        return bytes(self.buffer[:self._length])


class ParticlesSimple(ParticlesDataMutable):
    """
    ParticlesSimple
    ---------------
    Columnar particle set: attribute schema, fixed attributes, one region per
    attribute and the sequential write cursor.

    Values can be written two ways:

    - write_value(v): sequential, once per component in attribute order for
      the most recently added particle. Out-of-order or surplus writes raise
      ProtocolError instead of corrupting the layout.
    - write_value_at(attr, particle, component, v): addressed.
    """

    def __init__(self):
        self._particle_count = 0
        self._attributes: List[ParticleAttribute] = []
        self._strides: List[int] = []
        self._regions: List[_AttributeRegion] = []
        self._name_to_attribute: Dict[str, int] = {}
        self._fixed_attributes: List[FixedAttribute] = []
        self._name_to_fixed: Dict[str, int] = {}
        # (attribute_index, component) for every writable component of a particle
        self._slots: List[Tuple[int, int]] = []
        self._cursor = 0

    # ---- info ----
    def num_particles(self) -> int:
        return self._particle_count

    def num_attributes(self) -> int:
        return len(self._attributes)

    def num_fixed_attributes(self) -> int:
        return len(self._fixed_attributes)

    def attribute_info(self, name: str) -> ParticleAttribute:
        index = self._name_to_attribute.get(name)
        if index is None:
            raise SchemaError(f"no attribute named '{name}'")
        return self._attributes[index]

    def attribute_info_by_index(self, index: int) -> ParticleAttribute:
        if not 0 <= index < len(self._attributes):
            raise SchemaError(f"attribute index {index} out of range")
        return self._attributes[index]

    def fixed_attribute_info(self, name: str) -> FixedAttribute:
        index = self._name_to_fixed.get(name)
        if index is None:
            raise SchemaError(f"no fixed attribute named '{name}'")
        return self._fixed_attributes[index]

    def fixed_attribute_info_by_index(self, index: int) -> FixedAttribute:
        if not 0 <= index < len(self._fixed_attributes):
            raise SchemaError(f"fixed attribute index {index} out of range")
        return self._fixed_attributes[index]

    # ---- schema ----
    def add_attribute(self, name: str, ptype: AttributeType, count: int) -> ParticleAttribute:
        """Adds an attribute with the provided name, type and count."""
        check_attribute_definition(name, ptype, count)
        if name in self._name_to_attribute:
            raise SchemaError(f"attribute '{name}' already exists", ErrorCode.SCH002)
        if self._particle_count > 0:
            raise SchemaError(
                f"cannot add attribute '{name}' after {self._particle_count} particles were added",
                ErrorCode.SCH003,
            )

        attr = ParticleAttribute(name=name, type=ptype, count=count,
                                 attribute_index=len(self._attributes))
        stride = storage_width(ptype) * count
        self._attributes.append(attr)
        self._strides.append(stride)
        self._regions.append(_AttributeRegion(stride))
        self._name_to_attribute[name] = attr.attribute_index
        if stride:
            self._slots.extend((attr.attribute_index, c) for c in range(count))
        return attr

    def add_fixed_attribute(self, name: str, ptype: AttributeType, count: int) -> FixedAttribute:
        check_attribute_definition(name, ptype, count)
        if name in self._name_to_fixed:
            raise SchemaError(f"fixed attribute '{name}' already exists", ErrorCode.SCH002)
        attr = FixedAttribute(name=name, type=ptype, count=count,
                              attribute_index=len(self._fixed_attributes))
        self._fixed_attributes.append(attr)
        self._name_to_fixed[name] = attr.attribute_index
        return attr

    def stride(self, attr: AttributeRef) -> int:
        return self._strides[self._resolve(attr).attribute_index]

    # ---- particles ----
    def add_particle(self) -> int:
        """Adds a new particle and returns its index."""
        return self.add_particles(1)

    def add_particles(self, count: int) -> int:
        """Adds ``count`` zero-filled particles; returns the index of the first."""
        if count < 0:
            raise ValueError(f"particle count must be non-negative, got {count}")
        if not self.is_complete():
            raise ProtocolError(
                f"particle {self._particle_count - 1} has {self._cursor} of "
                f"{len(self._slots)} values written",
                ErrorCode.PRO002,
            )
        index = self._particle_count
        if count == 0:
            return index
        for region in self._regions:
            region.grow(region.stride * count)
        self._particle_count += count
        self._cursor = 0
        return index

    def is_complete(self) -> bool:
        return self._cursor == 0 or self._cursor == len(self._slots)

    # ---- writes ----
    def write_value(self, value) -> None:
        """
        Stores one component at the sequential cursor.

        Order per particle: attribute 0 components 0..count-1, attribute 1, ...
        """
        if self._particle_count == 0:
            raise ProtocolError("write_value called before add_particle")
        if self._cursor >= len(self._slots):
            raise ProtocolError(
                f"particle {self._particle_count - 1} already has all "
                f"{len(self._slots)} values written"
            )
        attr_index, component = self._slots[self._cursor]
        attr = self._attributes[attr_index]
        self._store(attr, self._particle_count - 1, component, value)
        self._cursor += 1

    def write_value_at(self, attr: AttributeRef, particle: int, component: int, value) -> None:
        info = self._resolve(attr)
        self._check_particle(particle)
        if not 0 <= component < info.count:
            raise IndexError(f"component {component} out of range for '{info.name}' ({info.count})")
        if self._strides[info.attribute_index] == 0:
            raise ProtocolError(f"attribute '{info.name}' of type NONE holds no values")
        self._store(info, particle, component, value)

    # ---- reads ----
    def data(self, attr: AttributeRef, particle: int) -> tuple:
        info = self._resolve(attr)
        self._check_particle(particle)
        width = storage_width(info.type)
        if width == 0:
            return ()
        region = self._regions[info.attribute_index]
        base = particle * region.stride
        return tuple(unpack_from(info.type, region.buffer, base + c * width)
                     for c in range(info.count))

    def raw_data(self, attr: AttributeRef) -> bytes:
        return self._regions[self._resolve(attr).attribute_index].to_bytes()

    def region_length(self, attr: AttributeRef) -> int:
        """Logical byte length of one attribute region."""
        return len(self._regions[self._resolve(attr).attribute_index])

    # ---- internals ----
    def _resolve(self, attr: AttributeRef) -> ParticleAttribute:
        if isinstance(attr, str):
            return self.attribute_info(attr)
        index = getattr(attr, "attribute_index", None)
        if (not isinstance(index, int) or not 0 <= index < len(self._attributes)
                or self._attributes[index] != attr):
            raise SchemaError(f"attribute handle {attr!r} does not belong to this particle set")
        return attr

    def _check_particle(self, particle: int) -> None:
        if not 0 <= particle < self._particle_count:
            raise IndexError(f"particle {particle} out of range ({self._particle_count} particles)")

    def _store(self, attr: ParticleAttribute, particle: int, component: int, value) -> None:
        region = self._regions[attr.attribute_index]
        offset = particle * region.stride + component * storage_width(attr.type)
        try:
            pack_into(attr.type, region.buffer, offset, value)
        except (TypeError, ValueError, OverflowError) as e:
            raise ProtocolError(
                f"bad value for '{attr.name}'[{component}] of particle {particle}: {e}"
            ) from e

    def __repr__(self) -> str:
        names = ", ".join(f"{a.name}:{a.type.name}[{a.count}]" for a in self._attributes)
        return (f"ParticlesSimple(particles={self._particle_count}, attributes=[{names}], "
                f"fixed={len(self._fixed_attributes)})")


class ParticlesSimpleBuilder:
    """Creates empty particle sets, optionally with a starting schema."""

    def __init__(self):
        self._attributes: List[Tuple[str, AttributeType, int]] = []

    def with_attribute(self, name: str, ptype: AttributeType, count: int) -> "ParticlesSimpleBuilder":
        self._attributes.append((name, ptype, count))
        return self

    def finalize(self) -> ParticlesSimple:
        particles = ParticlesSimple()
        for name, ptype, count in self._attributes:
            particles.add_attribute(name, ptype, count)
        return particles


def new_schema(attributes: Optional[Iterable[Tuple[str, AttributeType, int]]] = None) -> ParticlesSimple:
    """Empty particle set, with ``attributes`` declared in order when given."""
    builder = ParticlesSimpleBuilder()
    for name, ptype, count in attributes or ():
        builder.with_attribute(name, ptype, count)
    return builder.finalize()
