"""Sample handler module: arithmetic on coerced arguments."""


def add(*numbers):
    return sum(numbers)


def divide(a, b):
    return a / b


def describe(value):
    return {"value": value, "type": type(value).__name__}


FUNCTIONS = {
    "add": add,
    "divide": divide,
    "describe": describe,
}
