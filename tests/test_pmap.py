# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for PersistentMap."""

import pytest

from genro_filetree import PersistentMap


class Clash:
    """Key whose instances all share the same hash."""

    def __init__(self, name):
        self.name = name

    def __hash__(self):
        return 42

    def __eq__(self, other):
        return isinstance(other, Clash) and other.name == self.name

    def __repr__(self):
        return f"Clash({self.name!r})"


class TestPersistentMapBasic:
    """Tests for reading and building maps."""

    def test_empty_map(self):
        """Test a new map is empty."""
        m = PersistentMap()
        assert len(m) == 0
        assert list(m) == []
        assert 'a' not in m
        assert m.get('a') is None

    def test_from_dict(self):
        """Test building from a dict."""
        m = PersistentMap({'a': 1, 'b': 2})
        assert len(m) == 2
        assert m['a'] == 1
        assert m['b'] == 2

    def test_from_pairs(self):
        """Test building from (key, value) pairs, last one wins."""
        m = PersistentMap([('a', 1), ('b', 2), ('a', 3)])
        assert len(m) == 2
        assert m['a'] == 3

    def test_missing_key_raises(self):
        """Test missing key raises KeyError."""
        m = PersistentMap({'a': 1})
        with pytest.raises(KeyError):
            m['missing']

    def test_equality_with_dict(self):
        """Test a map equals a dict with the same content."""
        assert PersistentMap({'a': 1, 'b': 2}) == {'b': 2, 'a': 1}

    def test_items_view(self):
        """Test items iterates every pair and supports membership."""
        m = PersistentMap({'a': 1, 'b': 2})
        assert sorted(m.items()) == [('a', 1), ('b', 2)]
        assert ('a', 1) in m.items()
        assert ('a', 2) not in m.items()
        assert len(m.items()) == 2

    def test_repr(self):
        """Test string representation."""
        assert repr(PersistentMap({'a': 1})) == "PersistentMap({'a': 1})"


class TestPersistentMapUpdates:
    """Tests for set, discard and delete."""

    def test_set_returns_new_map(self):
        """Test set leaves the original untouched."""
        m1 = PersistentMap({'a': 1})
        m2 = m1.set('b', 2)
        assert dict(m1) == {'a': 1}
        assert dict(m2) == {'a': 1, 'b': 2}

    def test_set_overwrites(self):
        """Test set on an existing key keeps the size."""
        m1 = PersistentMap({'a': 1})
        m2 = m1.set('a', 10)
        assert m2['a'] == 10
        assert len(m2) == 1
        assert m1['a'] == 1

    def test_set_same_value_returns_self(self):
        """Test setting the identical value is a no-op."""
        value = object()
        m = PersistentMap({'a': value})
        assert m.set('a', value) is m

    def test_discard(self):
        """Test discard removes a key."""
        m1 = PersistentMap({'a': 1, 'b': 2})
        m2 = m1.discard('a')
        assert dict(m2) == {'b': 2}
        assert dict(m1) == {'a': 1, 'b': 2}

    def test_discard_missing_returns_self(self):
        """Test discard of a missing key is a no-op."""
        m = PersistentMap({'a': 1})
        assert m.discard('zzz') is m

    def test_delete_missing_raises(self):
        """Test delete of a missing key raises KeyError."""
        with pytest.raises(KeyError):
            PersistentMap({'a': 1}).delete('zzz')

    def test_delete_last_key(self):
        """Test deleting the only key gives an empty map."""
        m = PersistentMap({'a': 1}).delete('a')
        assert len(m) == 0
        assert 'a' not in m

    def test_many_keys(self):
        """Test the map behaves like a dict across many inserts and deletes."""
        m = PersistentMap()
        expected = {}
        for i in range(2000):
            m = m.set(i, str(i))
            expected[i] = str(i)
        assert len(m) == 2000
        assert dict(m) == expected

        for i in range(0, 2000, 3):
            m = m.delete(i)
            del expected[i]
        assert len(m) == len(expected)
        assert dict(m) == expected
        assert all(m[k] == v for k, v in expected.items())

        for k in list(expected):
            m = m.delete(k)
        assert len(m) == 0
        assert list(m) == []

    def test_old_versions_survive(self):
        """Test every intermediate version keeps its own content."""
        versions = [PersistentMap()]
        for i in range(100):
            versions.append(versions[-1].set(f'k{i}', i))
        for n, version in enumerate(versions):
            assert len(version) == n
            assert set(version) == {f'k{i}' for i in range(n)}

    def test_untouched_values_are_shared(self):
        """Test values of untouched keys are the same objects."""
        payload = ('x', 'y')
        m1 = PersistentMap({'a': payload, 'b': 1})
        m2 = m1.set('b', 2)
        assert m2['a'] is payload


class TestPersistentMapCollisions:
    """Tests for keys with identical hashes."""

    def test_colliding_keys(self):
        """Test colliding keys are all stored and found."""
        keys = [Clash(n) for n in 'abcd']
        m = PersistentMap((k, k.name) for k in keys)
        assert len(m) == 4
        for k in keys:
            assert m[Clash(k.name)] == k.name

    def test_colliding_missing_key(self):
        """Test a colliding but absent key is not found."""
        m = PersistentMap({Clash('a'): 1, Clash('b'): 2})
        assert Clash('c') not in m

    def test_colliding_overwrite_and_delete(self):
        """Test overwrite and delete inside a collision node."""
        m1 = PersistentMap({Clash('a'): 1, Clash('b'): 2, Clash('c'): 3})
        m2 = m1.set(Clash('b'), 20)
        assert m2[Clash('b')] == 20
        assert len(m2) == 3

        m3 = m2.delete(Clash('a')).delete(Clash('c'))
        assert dict(m3) == {Clash('b'): 20}
        assert m3[Clash('b')] == 20
        assert len(m1) == 3

    def test_colliding_with_regular_keys(self):
        """Test colliding keys mixed with ordinary keys."""
        m = PersistentMap({42: 'int', Clash('a'): 'a', Clash('b'): 'b'})
        assert m[42] == 'int'
        m = m.delete(Clash('a'))
        assert m[42] == 'int'
        assert m[Clash('b')] == 'b'
        assert len(m) == 2
