"""Example Flask voice webhook built with twiml_builder.

Twilio requests ``/voice`` when a call comes in and ``/menu`` once the caller
presses a digit. Both handlers build TwiML and return it through the Flask
adapter.
"""

from flask import Flask, Response, request

from twiml_builder import build
from twiml_builder.api.adapters import get_adapter

app = Flask(__name__)

DEPARTMENTS = ["sales", "support", "billing"]


def main_menu(twiml):
    with twiml.gather(num_digits=1, action="/menu", method="POST"):
        twiml.say("Welcome to Example Corp.", voice="woman")
        for digit, department in enumerate(DEPARTMENTS, start=1):
            twiml.record_option(digit, f"For {department}, press {digit}.", {"department": department})
    twiml.redirect("/voice")


def twiml_response(output):
    """Wrap build output in a Flask response."""
    flask_adapter = get_adapter("flask")
    if not flask_adapter:
        return Response("Flask adapter not available", status=500)

    conversion_result = flask_adapter.to_target(output)
    if not conversion_result.success:
        return Response(conversion_result.errors[0], status=500)
    return conversion_result.converted_data


@app.route("/voice", methods=["POST"])
def voice():
    """Answer an incoming call with the main menu."""
    options, markup = build(main_menu, correlation_id=request.form.get("CallSid"))
    return twiml_response(markup)


@app.route("/menu", methods=["POST"])
def menu():
    """Route the caller to the department matching the pressed digit."""
    options, _ = build(main_menu)
    selected = {str(digit): attributes for digit, attributes in options}.get(request.form.get("Digits", ""))

    if selected is None:
        return twiml_response(build(lambda twiml: twiml.redirect("/voice")))

    def forward(twiml):
        twiml.say(f"Connecting you to {selected['department']}.")
        with twiml.dial():
            twiml.client(selected["department"])

    return twiml_response(build(forward))


if __name__ == "__main__":
    app.run(debug=True)
