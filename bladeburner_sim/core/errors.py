from __future__ import annotations


class ActionEconomyError(ValueError):
    """Base class for every recoverable failure raised by the simulation core."""


class NotFoundError(ActionEconomyError):
    pass


class InvalidActionError(NotFoundError):
    def __init__(self, action_type: object, name: str, reason: str | None = None) -> None:
        self.action_type = action_type
        self.name = name
        type_label = getattr(action_type, "value", action_type)
        message = f"Invalid action type='{type_label}', name='{name}'"
        super().__init__(f"{message}: {reason}" if reason else message)


class UnknownSkillError(NotFoundError):
    def __init__(self, skill_name: str) -> None:
        self.skill_name = skill_name
        super().__init__(f"Unknown skill '{skill_name}'.")


class UnknownCityError(NotFoundError):
    def __init__(self, city_name: str) -> None:
        self.city_name = city_name
        super().__init__(f"Invalid city: {city_name}")


class InvalidStateError(ActionEconomyError):
    pass


class InsufficientResourceError(ActionEconomyError):
    pass


class InsufficientRankError(InsufficientResourceError):
    pass


class InsufficientStaminaError(InsufficientResourceError):
    def __init__(self, required: float, available: float) -> None:
        self.required = required
        self.available = available
        super().__init__(f"Need {required:.3f} stamina, have {available:.3f}.")


class InsufficientSkillPointsError(InsufficientResourceError):
    def __init__(self, required: int, available: int) -> None:
        self.required = required
        self.available = available
        super().__init__(f"Need {required} skill points, have {available}.")


class InsufficientPersonnelError(InsufficientResourceError):
    pass


class OutOfRangeError(ActionEconomyError):
    pass
