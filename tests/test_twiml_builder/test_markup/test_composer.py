"""Tests for scope composition on MarkupBuilder."""

from typing import Tuple

import pytest

from twiml_builder.markup import (
    AttributeValueError,
    FragmentBuffer,
    MarkupBuilder,
    Scope,
    ScopeError,
)
from twiml_builder.verbs import DEFAULT_REGISTRY, VerbCapability, VerbRegistry


def make_builder(**kwargs) -> Tuple[MarkupBuilder, FragmentBuffer, FragmentBuffer]:
    """Create a builder over two fresh buffers."""
    markup = FragmentBuffer(name="markup")
    options = FragmentBuffer(name="options")
    return MarkupBuilder(markup, options, **kwargs), markup, options


class TestOpenClose:
    """Tests for explicit open/close."""

    def test_open_and_close(self):
        """Test explicit open and close produce a balanced pair."""
        builder, markup, _ = make_builder()

        builder.open("gather", {"digits": 3})
        builder.emit_text("Phone Number")
        builder.close()

        assert markup.render() == '<Gather digits="3">Phone Number</Gather>'
        assert builder.depth == 0

    def test_close_matches_innermost_tag(self):
        """Test closing follows the open-tag stack."""
        builder, markup, _ = make_builder()

        builder.open("dial")
        builder.open("number")
        assert builder.open_tags == ("dial", "number")
        builder.close()
        builder.close()

        assert markup.render() == "<Dial><Number></Number></Dial>"

    def test_close_without_open_raises(self):
        """Test closing with nothing open is an error."""
        builder, _, _ = make_builder()

        with pytest.raises(ScopeError, match="no open tag"):
            builder.close()

    def test_max_depth_tracked(self):
        """Test the deepest nesting level is recorded."""
        builder, _, _ = make_builder()

        builder.open("a")
        builder.open("b")
        builder.close()
        builder.open("c")
        builder.close()
        builder.close()

        assert builder.max_depth == 2
        assert builder.fragment_count == 6


class TestEmit:
    """Tests for text and empty-tag emission."""

    def test_emit_text_stringifies(self):
        """Test non-string text is converted with str()."""
        builder, markup, _ = make_builder()

        builder.emit_text(1112223333)

        assert markup.render() == "1112223333"

    def test_emit_text_unescaped_by_default(self):
        """Test text is written verbatim unless escaping is enabled."""
        builder, markup, _ = make_builder()
        builder.emit_text("Fish & Chips")

        escaping, escaped_markup, _ = make_builder(escape=True)
        escaping.emit_text("Fish & Chips")

        assert markup.render() == "Fish & Chips"
        assert escaped_markup.render() == "Fish &amp; Chips"

    def test_emit_empty(self):
        """Test self-closing tags."""
        builder, markup, _ = make_builder()

        builder.emit_empty("pause", {"length": 5})

        assert markup.render() == '<Pause length="5" />'


class TestOpenScope:
    """Tests for open_scope with bodies and context managers."""

    def test_body_routine(self):
        """Test a body routine runs between the opening and closing tags."""
        builder, markup, _ = make_builder()

        def body(twiml):
            twiml.emit_text("How are you doing?")

        result = builder.open_scope("mms", {"to": "1112223333", "from_": "2223334444"}, body)

        assert result is None
        assert markup.render() == (
            '<Mms to="1112223333" from="2223334444">How are you doing?</Mms>'
        )

    def test_body_receives_builder(self):
        """Test the body is called with the builder itself."""
        builder, _, _ = make_builder()
        received = []

        builder.open_scope("message", None, received.append)

        assert received == [builder]

    def test_container_verb_with_body_routine(self):
        """Test a container verb given a nested routine renders it inside the tag."""
        builder, markup, _ = make_builder()

        result = builder.dial(lambda twiml: twiml.number("111"), action="/calls/new")

        assert result is None
        assert markup.render() == '<Dial action="/calls/new"><Number>111</Number></Dial>'

    def test_body_routine_after_unentered_scope(self):
        """Test a pending scope is written before a body-form scope opens."""
        builder, markup, _ = make_builder()

        builder.open_scope("message")
        builder.open_scope("gather", {"digits": 3}, lambda twiml: twiml.emit_text("Phone Number"))

        assert markup.render() == '<Message /><Gather digits="3">Phone Number</Gather>'

    def test_nested_body_routines(self):
        """Test body routines nest."""
        builder, markup, _ = make_builder()

        def inner(twiml):
            twiml.say("inner")

        builder.open_scope("gather", None, lambda twiml: twiml.open_scope("group", None, inner))

        assert markup.render() == "<Gather><Group><Say>inner</Say></Group></Gather>"
        assert builder.depth == 0

    def test_unentered_scope_rejects_bad_attribute_immediately(self):
        """Test invalid attribute values raise from the container call itself."""
        builder, markup, _ = make_builder()
        calls = []

        with pytest.raises(AttributeValueError, match="'timeout'"):
            builder.dial(timeout=2.5)
            calls.append("dial returned")

        assert calls == []
        builder.say("next")
        assert markup.render() == "<Say>next</Say>"

    def test_context_manager(self):
        """Test a scope used in a with block."""
        builder, markup, _ = make_builder()

        with builder.open_scope("dial", {"action": "/calls/new"}) as twiml:
            assert twiml is builder
            twiml.number("1112223333")

        assert markup.render() == '<Dial action="/calls/new"><Number>1112223333</Number></Dial>'

    def test_nested_children_in_order(self):
        """Test N children land between the container tags in emission order."""
        builder, markup, _ = make_builder()

        with builder.open_scope("gather"):
            for index in range(4):
                builder.say(f"item {index}")

        fragments = markup.snapshot()
        assert fragments[0] == "<Gather>"
        assert fragments[-1] == "</Gather>"
        assert markup.render() == (
            "<Gather>"
            + "".join(f"<Say>item {index}</Say>" for index in range(4))
            + "</Gather>"
        )

    def test_empty_with_block(self):
        """Test an entered scope with no children renders open and close tags."""
        builder, markup, _ = make_builder()

        with builder.open_scope("message", {"action": "/hello", "method": "post"}):
            pass

        assert markup.render() == '<Message action="/hello" method="post"></Message>'

    def test_unentered_scope_becomes_self_closing(self):
        """Test a scope never entered is written as a self-closing tag."""
        builder, markup, _ = make_builder()

        scope = builder.open_scope("dial", {"action": "/x"})
        builder.say("after")

        assert isinstance(scope, Scope)
        assert scope.emitted
        assert markup.render() == '<Dial action="/x" /><Say>after</Say>'

    def test_unentered_scope_flushed_before_close(self):
        """Test a pending scope lands inside its parent."""
        builder, markup, _ = make_builder()

        with builder.open_scope("gather"):
            builder.open_scope("dial")

        assert markup.render() == "<Gather><Dial /></Gather>"

    def test_consecutive_unentered_scopes_keep_order(self):
        """Test creating a scope flushes the previous pending one first."""
        builder, markup, _ = make_builder()

        builder.open_scope("dial")
        builder.open_scope("gather")
        builder.emit_text("")

        assert markup.render() == "<Dial /><Gather />"

    def test_entering_flushed_scope_raises(self):
        """Test a scope cannot be entered after it was written."""
        builder, _, _ = make_builder()

        scope = builder.open_scope("dial")
        builder.emit_text("x")

        with pytest.raises(ScopeError, match="already written"):
            with scope:
                pass

    def test_body_failure_closes_scope_and_propagates(self):
        """Test exceptions propagate and the tag is still closed."""
        builder, markup, _ = make_builder()

        def body(twiml):
            twiml.say("before")
            raise LookupError("caller failure")

        with pytest.raises(LookupError, match="caller failure"):
            builder.open_scope("gather", None, body)

        assert builder.depth == 0
        assert markup.render() == "<Gather><Say>before</Say></Gather>"

    def test_failure_unwinds_manual_tags(self):
        """Test a failing body also closes tags it opened by hand."""
        builder, markup, _ = make_builder()

        with pytest.raises(ValueError):
            with builder.open_scope("gather"):
                builder.open("say")
                raise ValueError("boom")

        assert builder.depth == 0
        assert markup.render() == "<Gather><Say></Say></Gather>"

    def test_unclosed_manual_tag_is_an_error(self):
        """Test leaving a manually opened tag inside a scope is reported."""
        builder, _, _ = make_builder()

        with pytest.raises(ScopeError, match="Unclosed tags inside 'gather': say"):
            with builder.open_scope("gather"):
                builder.open("say")

    def test_over_closing_inside_scope_is_an_error(self):
        """Test closing the scope's own tag by hand is reported as over-closing."""
        builder, _, _ = make_builder()

        with pytest.raises(ScopeError, match="Closed more tags than were opened inside 'gather'"):
            with builder.open_scope("gather"):
                builder.close()


class TestVerbAccess:
    """Tests for verb methods resolved through the registry."""

    def test_registered_verbs_are_methods(self):
        """Test verbs are callable as builder attributes."""
        builder, markup, _ = make_builder()

        builder.say("Hello there!", voice="woman")
        builder.hangup()

        assert markup.render() == '<Say voice="woman">Hello there!</Say><Hangup />'

    def test_unknown_attribute(self):
        """Test unknown names raise AttributeError."""
        builder, _, _ = make_builder()

        with pytest.raises(AttributeError, match="no attribute or verb 'mms'"):
            builder.mms("hi")

    def test_private_names_not_resolved(self):
        """Test underscore names never resolve to verbs."""
        builder, _, _ = make_builder()

        with pytest.raises(AttributeError):
            builder._say

    def test_custom_registry(self):
        """Test verbs from a custom registry."""
        registry = DEFAULT_REGISTRY.copy()
        registry.register("mms", VerbCapability.CONTAINER)
        builder, markup, _ = make_builder(registry=registry)

        with builder.mms(to="1112223333"):
            builder.body("Hi")

        assert markup.render() == '<Mms to="1112223333"><Body>Hi</Body></Mms>'

    def test_verb_by_name(self):
        """Test calling a verb through verb()."""
        registry = VerbRegistry()
        registry.register("open", VerbCapability.LEAF)
        builder, markup, _ = make_builder(registry=registry)

        builder.verb("open", "door", level=2)

        assert markup.render() == '<Open level="2">door</Open>'


class TestRecordOption:
    """Tests for record_option."""

    def test_records_option_and_says_text(self):
        """Test both buffers receive their half of the option."""
        builder, markup, options = make_builder()

        builder.record_option(1, "hello there!", {"menu": "other_menu"}, {"voice": "woman"})

        assert options.snapshot() == [(1, {"menu": "other_menu"})]
        assert markup.render() == '<Say voice="woman">hello there!</Say>'
        assert builder.options_recorded == 1

    def test_menu_attributes_default_empty(self):
        """Test missing menu attributes are recorded as an empty mapping."""
        builder, _, options = make_builder()

        builder.record_option("9", "Press 9")

        assert options.snapshot() == [("9", {})]

    def test_prompt_follows_say_call_rules(self):
        """Test the prompt goes through the say verb unchanged."""
        builder, markup, options = make_builder()

        builder.record_option(1, 42)
        builder.record_option(2, None, None, {"voice": "man"})

        assert options.snapshot() == [(1, {}), (2, {})]
        assert markup.render() == '<Say>42</Say><Say voice="man" />'

    def test_options_interleave_with_markup(self):
        """Test the k-th option matches the k-th Say fragment."""
        builder, markup, options = make_builder()

        for digit in (1, 2, 3):
            builder.play(f"/prompt-{digit}.mp3")
            builder.record_option(digit, f"Press {digit}")

        says = [fragment for fragment in markup.snapshot() if fragment.startswith("Press")]
        assert [record.discriminator for record in options.snapshot()] == [1, 2, 3]
        assert says == ["Press 1", "Press 2", "Press 3"]
