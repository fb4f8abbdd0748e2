# /// script
# dependencies = [
#   "namedi",
# ]
# ///
import asyncio

import namedi


class Greeter:
    name: str

    def __init__(self, name: str) -> None:
        self.name = name

    def greet(self) -> str:
        return f"Hello {self.name}"


async def load_name() -> str:
    await asyncio.sleep(0)
    return "namedi-testing"


injector = namedi.Injector()
injector.register("punctuation", "!")
injector.factory("greeter", lambda name: Greeter(name))


def print_greeting(greeter, punctuation) -> None:
    print(greeter.greet() + punctuation)


async def main() -> None:
    # The factory's dependencies are resolved from the child, so it sees the child's name
    request = injector.create({"name": load_name()})
    await request.call(print_greeting)

    greet_twice = request.resolved(print_greeting)
    await greet_twice()
    await greet_twice()


if __name__ == "__main__":
    asyncio.run(main())
