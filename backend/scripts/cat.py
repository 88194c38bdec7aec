"""Sample handler module: a cat that walks, sleeps and meows.

Call as `cat.walk("tomy")`, `cat.sleep("tomy", 3)` or `cat.meow(2)`.
"""

import asyncio


def walk(name, steps=3):
    return {"cat": name, "action": "walk", "steps": steps}


async def sleep(name, seconds=0):
    await asyncio.sleep(min(float(seconds), 1.0))
    return f"{name} slept for {seconds}s"


def meow(times=1):
    return " ".join(["meow"] * int(times))


FUNCTIONS = {
    "walk": walk,
    "sleep": sleep,
    "meow": meow,
}
