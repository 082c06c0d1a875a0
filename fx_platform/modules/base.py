from abc import ABC, abstractmethod


class Module(ABC):
    """Base class for runnable modules.

    ``run()`` drives the lifecycle: initialize, validate, execute, and
    always teardown. The CLI runner awaits it with ``asyncio.run()``.
    """

    async def initialize(self) -> None:
        """Set up resources needed by the module. Override as needed."""

    async def validate(self) -> None:
        """Check preconditions before execution. Override as needed."""

    @abstractmethod
    async def execute(self) -> int:
        """Run the module logic. Must return an exit code."""
        ...

    async def teardown(self) -> None:
        """Clean up resources. Override as needed."""

    async def run(self) -> int:
        try:
            await self.initialize()
            await self.validate()
            return await self.execute()
        finally:
            await self.teardown()
