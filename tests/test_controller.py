import asyncio
from types import SimpleNamespace

import pytest

from avatar_chat.ai.completion import CompletionClient
from avatar_chat.ai.grammar import GrammarCorrector
from avatar_chat.core.config import AIConfig, DEFAULT_FALLBACK_REPLY
from avatar_chat.core.controller import ChatController
from avatar_chat.core.event_bus import EventBus
from avatar_chat.core.state import ChatState


class FakeCompletions:
    def __init__(self, reply="Sure thing!", error=None, delay=0.0):
        self.reply = reply
        self.error = error
        self.delay = delay
        self.calls = []
        self.active = 0
        self.max_active = 0

    async def create(self, **kwargs):
        self.calls.append(kwargs["messages"][-1]["content"])
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delay)
            if self.error:
                raise self.error
            message = SimpleNamespace(content=self.reply)
            return SimpleNamespace(choices=[SimpleNamespace(message=message)])
        finally:
            self.active -= 1


class FakeSpeechOutput:
    def __init__(self):
        self.spoken = []

    def speak(self, text):
        self.spoken.append(text)


class FakeSpeechInput:
    def __init__(self, transcript=None, available=True):
        self.transcript = transcript
        self.available = available
        self.notices = []

    async def listen_once(self, on_transcript):
        if not self.available:
            self.notices.append("not supported")
            return False
        if self.transcript:
            await on_transcript(self.transcript)
        return True


def make_controller(completions=None, speech_input=None):
    bus = EventBus()
    asyncio.run(bus.initialize())
    state = ChatState(bus)
    completions = completions or FakeCompletions()
    client = CompletionClient(
        AIConfig(),
        state=state,
        client=SimpleNamespace(chat=SimpleNamespace(completions=completions)),
    )
    speech = FakeSpeechOutput()
    controller = ChatController(
        state=state,
        corrector=GrammarCorrector(),
        completion=client,
        speech_output=speech,
        speech_input=speech_input,
        event_bus=bus,
    )
    return SimpleNamespace(
        controller=controller, state=state, completions=completions, speech=speech, bus=bus
    )


def test_submit_with_correction():
    app = make_controller(FakeCompletions(reply="Dogs are great pets."))
    app.state.edit_input("i has a dog")

    asyncio.run(app.controller.submit())

    assert app.completions.calls == ["I have a dog"]
    assert app.state.transcript_text() == "Correction: I have a dog\nAI: Dogs are great pets."
    assert app.speech.spoken == [
        "I think you should say: I have a dog",
        "Dogs are great pets.",
    ]


def test_submit_without_correction_only_speaks_reply():
    app = make_controller(FakeCompletions(reply="Hello!"))

    asyncio.run(app.controller.submit("hello there"))

    assert app.completions.calls == ["hello there"]
    assert app.state.transcript_text() == "AI: Hello!"
    assert app.speech.spoken == ["Hello!"]


def test_transcript_accumulates_across_submissions():
    app = make_controller(FakeCompletions(reply="OK"))

    async def run():
        await app.controller.submit("first")
        await app.controller.submit("he go home")

    asyncio.run(run())

    assert [line.render() for line in app.state.transcript] == [
        "AI: OK",
        "Correction: He goes home",
        "AI: OK",
    ]


@pytest.mark.parametrize("error", [None, ConnectionError("down")])
def test_submit_always_clears_input(error):
    app = make_controller(FakeCompletions(error=error))
    app.state.edit_input("what time is it")

    asyncio.run(app.controller.submit())

    assert app.state.input_text == ""
    assert app.state.loading is False


def test_network_failure_shows_fallback_and_does_not_raise():
    app = make_controller(FakeCompletions(error=ConnectionError("down")))

    asyncio.run(app.controller.submit("tell me a joke"))

    assert app.state.transcript_text() == f"AI: {DEFAULT_FALLBACK_REPLY}"
    assert app.speech.spoken == [DEFAULT_FALLBACK_REPLY]


def test_empty_submission_still_asks_ai_and_clears_input():
    app = make_controller(FakeCompletions(reply="How can I help?"))

    asyncio.run(app.controller.submit(""))

    assert app.completions.calls == [""]
    assert app.state.transcript_text() == "AI: How can I help?"
    assert app.speech.spoken == ["How can I help?"]
    assert app.state.input_text == ""


def test_whitespace_submission_is_sent_as_typed():
    app = make_controller(FakeCompletions(reply="Yes?"))
    app.state.edit_input("   ")

    asyncio.run(app.controller.submit())

    assert app.completions.calls == ["   "]
    assert app.state.input_text == ""


def test_overlapping_submissions_run_one_at_a_time():
    completions = FakeCompletions(delay=0.01)
    app = make_controller(completions)
    loading_seen = []
    app.bus.subscribe("state_changed", lambda s: loading_seen.append(s.loading))

    async def run():
        await asyncio.gather(
            app.controller.submit("one"),
            app.controller.submit("two"),
            app.controller.submit("three"),
        )

    asyncio.run(run())

    assert completions.max_active == 1
    assert completions.calls == ["one", "two", "three"]
    assert app.state.loading is False
    # The flag never goes True twice in a row
    flips = [v for i, v in enumerate(loading_seen) if i == 0 or v != loading_seen[i - 1]]
    assert flips.count(True) == 3


def test_spoken_transcript_runs_pipeline():
    speech_input = FakeSpeechInput(transcript="she do her homework")
    app = make_controller(FakeCompletions(reply="Good job!"), speech_input=speech_input)

    started = asyncio.run(app.controller.start_listening())

    assert started is True
    assert app.state.input_text == "she do her homework"
    assert app.completions.calls == ["She does her homework"]
    assert app.speech.spoken == [
        "I think you should say: She does her homework",
        "Good job!",
    ]


def test_unavailable_recognition_short_circuits():
    speech_input = FakeSpeechInput(transcript="i has a dog", available=False)
    app = make_controller(speech_input=speech_input)
    app.controller.corrector = None  # any use would fail

    started = asyncio.run(app.controller.start_listening())

    assert started is False
    assert speech_input.notices == ["not supported"]
    assert app.completions.calls == []
    assert app.state.transcript == []
    assert app.state.input_text == ""


def test_events_published():
    app = make_controller(FakeCompletions(reply="Hi!"))
    events = []
    app.bus.subscribe("user_submitted", lambda text: events.append(("user", text)))
    app.bus.subscribe("ai_response", lambda text: events.append(("ai", text)))

    asyncio.run(app.controller.submit("hello"))

    assert events == [("user", "hello"), ("ai", "Hi!")]
