#!/usr/bin/env python3
"""
Quick Start Guide for the TwiML Builder.

Walks through the main ways of composing a TwiML document: the one-call
``build`` function, nested verbs, menu options and the document object
with its build metrics.
"""

from twiml_builder import BuilderConfig, TwimlDocument, build
from twiml_builder.api.adapters import get_adapter


def greeting(twiml):
    twiml.say("Thanks for calling!", voice="woman")
    twiml.play("https://api.twilio.com/cowbell.mp3", loop=2)
    twiml.hangup()


def main_menu(twiml):
    departments = ["sales", "support", "billing"]

    with twiml.gather(num_digits=1, action="/menu", method="POST"):
        for digit, department in enumerate(departments, start=1):
            twiml.record_option(
                digit,
                f"For {department}, press {digit}.",
                {"department": department},
            )
    twiml.redirect("/menu")


def forward_call(twiml):
    with twiml.dial(action="/calls/finished", timeout=20):
        twiml.number("1112223333")
        twiml.client("support_agent")


def quick_start_example():
    """Quick start example showing basic usage."""

    print("🚀 QUICK START - TwiML Builder")
    print("=" * 45)

    print("\n📄 Step 1: A simple document")
    print("-" * 30)
    print(build(greeting))

    print("\n🔀 Step 2: Nested verbs")
    print("-" * 30)
    print(build(forward_call))

    print("\n📋 Step 3: Menu options")
    print("-" * 30)
    options, markup = build(main_menu)
    for discriminator, menu_attributes in options:
        print(f"  {discriminator} -> {menu_attributes['department']}")
    print(markup)

    print("\n📊 Step 4: Document object and metrics")
    print("-" * 30)
    document = TwimlDocument(BuilderConfig.escaped(), correlation_id="quick-start")
    with document as twiml:
        twiml.say("Fish & Chips are ready")
    print(document.markup)
    print(f"✅ Fragments written: {document.metrics.fragments_written}")
    print(f"📏 Max depth: {document.metrics.max_depth}")

    print("\n🌳 Step 5: Inspecting the tree with lxml")
    print("-" * 30)
    result = get_adapter("lxml").to_target(document.markup)
    if result.success:
        root = result.converted_data
        print(f"✅ Root <{root.tag}> with children {[child.tag for child in root]}")
    else:
        print(f"❌ {result.errors[0]}")


if __name__ == "__main__":
    quick_start_example()
