"""Skipped by directory discovery because of the leading underscore."""

from src.routing.annotations import route


class HiddenController:
    @route.get("/hidden")
    def hidden(self) -> dict[str, bool]:
        return {"hidden": True}
