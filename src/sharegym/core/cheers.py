"""
Cheer message templates.

Each trigger has three interchangeable templates; one is picked uniformly
at random per cheer.  Placeholders: {weight}, {diff}, {days}, {streak},
{percent}.
"""

import random
from typing import Final

from .config import CHEER_PRIORITY
from .models import CheerTrigger, PersonalizedCheer

CHEER_TEMPLATES: Final[dict[str, list[tuple[str, str]]]] = {
    "firstSet": [
        ("🚀", "Starting is half the battle! Ease into it!"),
        ("💪", "First set is the warm-up. Take it steady."),
        ("🎯", "First step toward today's goal!"),
    ],
    "lastSet": [
        ("🔥", "Last set! Burn it all out!"),
        ("💯", "Final one! This is where it counts!"),
        ("🏆", "Stay focused to the end. Almost there!"),
    ],
    "hardSet": [
        ("💪", "The third set is the real one! Push through!"),
        ("⚡", "This is the tough part. Beat it and you grow!"),
        ("🔥", "The harder it gets, the more you build!"),
    ],
    "newPR": [
        ("🎉", "New record! {weight}kg, amazing!"),
        ("🏆", "Personal best broken! Congratulations!"),
        ("🌟", "PR smashed! Where is your limit?"),
    ],
    "heavierWeight": [
        ("📈", "{diff}kg more than last time! You're improving!"),
        ("💪", "You went heavier! Love the ambition!"),
        ("🚀", "Progressive overload in action. Perfect!"),
    ],
    "longRest": [
        ("😤", "Tough one? Rest up and go again!"),
        ("💭", "Rest is part of training. Catch your breath."),
        ("⏱️", "Start when you're ready. No rush!"),
    ],
    "struggling": [
        ("💪", "Hard moments are growth moments! A bit more!"),
        ("🔥", "Don't give up! You've got this!"),
        ("👊", "This is where you break your limits!"),
    ],
    "comeback": [
        ("🎉", "First workout in {days} days! Getting back is what matters!"),
        ("💪", "Welcome back! Starting again today!"),
        ("🌟", "Comeback time! Let's rebuild the habit!"),
    ],
    "consistency": [
        ("🔥", "{streak} days in a row! Incredible consistency!"),
        ("💯", "Your regular training habit is the best!"),
        ("👑", "King of the routine! Keep it going!"),
    ],
    "volumeIncrease": [
        ("📊", "Volume up {percent}% today! Growing!"),
        ("💪", "More work done! Your fitness is improving!"),
        ("🚀", "Volume record! You're clearly getting stronger!"),
    ],
}


def make_cheer(
    trigger: CheerTrigger,
    rng: random.Random,
    context: dict | None = None,
    **placeholders: object,
) -> PersonalizedCheer:
    """
    Pick a random template for trigger and fill in its placeholders.

    Args:
        trigger: Cheer trigger name
        rng: Random source (one template chosen uniformly from three)
        context: Auxiliary data for the UI (e.g. weight delta)
        **placeholders: Values substituted for {name} in the message

    Returns:
        PersonalizedCheer with the priority configured for the trigger
    """
    emoji, message = rng.choice(CHEER_TEMPLATES[trigger])
    for key, value in placeholders.items():
        message = message.replace("{" + key + "}", str(value))
    return PersonalizedCheer(
        trigger=trigger,
        message=message,
        emoji=emoji,
        priority=CHEER_PRIORITY.get(trigger, 0),
        context=dict(context or {}),
    )


def pick_highest_priority(cheers: list[PersonalizedCheer]) -> PersonalizedCheer | None:
    """Highest priority wins; equal priorities keep evaluation order (stable sort)."""
    if not cheers:
        return None
    return sorted(cheers, key=lambda c: c.priority, reverse=True)[0]
