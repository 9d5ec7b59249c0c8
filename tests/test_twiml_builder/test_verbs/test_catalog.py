"""Tests for the verb catalog."""

import threading

import pytest

from twiml_builder.verbs import (
    CONTAINER_VERBS,
    DEFAULT_REGISTRY,
    LEAF_VERBS,
    UnknownVerbError,
    VerbCapability,
    VerbRegistry,
    VerbSpec,
)


class TestVerbSpec:
    """Tests for VerbSpec."""

    def test_container_flag(self):
        """Test capability classification."""
        assert VerbSpec("gather", VerbCapability.CONTAINER).is_container
        assert not VerbSpec("say", VerbCapability.LEAF).is_container

    def test_validation(self):
        """Test invalid specs are rejected."""
        with pytest.raises(ValueError, match="Verb name cannot be empty"):
            VerbSpec("", VerbCapability.LEAF)

        with pytest.raises(ValueError, match="must be a VerbCapability"):
            VerbSpec("say", "leaf")


class TestDefaultRegistry:
    """Tests for the built-in TwiML catalog."""

    def test_containers(self):
        """Test the nesting verbs."""
        assert sorted(DEFAULT_REGISTRY.containers()) == ["dial", "gather", "message"]

    def test_leaves(self):
        """Test every leaf verb is registered as a leaf."""
        assert DEFAULT_REGISTRY.leaves() == list(LEAF_VERBS)
        assert len(DEFAULT_REGISTRY) == len(LEAF_VERBS) + len(CONTAINER_VERBS) == 20

    @pytest.mark.parametrize("name", ["say", "record", "hangup", "body", "media"])
    def test_lookup(self, name):
        """Test looking up leaf verbs."""
        spec = DEFAULT_REGISTRY.get(name)

        assert spec.name == name
        assert spec.capability is VerbCapability.LEAF
        assert name in DEFAULT_REGISTRY

    def test_unknown_verb(self):
        """Test unknown names raise UnknownVerbError, a KeyError."""
        with pytest.raises(UnknownVerbError):
            DEFAULT_REGISTRY.get("mms")

        assert issubclass(UnknownVerbError, KeyError)
        assert "mms" not in DEFAULT_REGISTRY


class TestVerbRegistry:
    """Tests for extending registries."""

    def test_register(self):
        """Test registering a new verb."""
        registry = VerbRegistry()

        spec = registry.register("mms", VerbCapability.CONTAINER)

        assert registry.get("mms") is spec
        assert registry.names() == ["mms"]

    def test_register_defaults_to_leaf(self):
        """Test the default capability is leaf."""
        registry = VerbRegistry()

        assert not registry.register("stream").is_container

    def test_duplicate_registration_rejected(self):
        """Test a name cannot be registered twice."""
        registry = VerbRegistry()
        registry.register("mms")

        with pytest.raises(ValueError, match="'mms' is already registered"):
            registry.register("mms", VerbCapability.CONTAINER)

    def test_copy_is_independent(self):
        """Test extending a copy leaves the original untouched."""
        registry = DEFAULT_REGISTRY.copy()
        registry.register("stream")

        assert "stream" in registry
        assert "stream" not in DEFAULT_REGISTRY
        assert len(registry) == len(DEFAULT_REGISTRY) + 1

    def test_iteration(self):
        """Test iterating yields specs in registration order."""
        registry = VerbRegistry([
            VerbSpec("a", VerbCapability.LEAF),
            VerbSpec("b", VerbCapability.CONTAINER),
        ])

        assert [spec.name for spec in registry] == ["a", "b"]

    def test_concurrent_registration(self):
        """Test registrations from several threads all land."""
        registry = VerbRegistry()

        threads = [
            threading.Thread(target=registry.register, args=(f"verb_{index}",))
            for index in range(20)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(registry) == 20
