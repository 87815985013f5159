def _continue() -> None:
    """Asks the user to continue."""
    answer = input("Continue Y/N? ")
    if answer.lower().strip() == "n":
        print("Aborting!")
        exit(-1)


def _confirm_operation(operation: str, network: str, details: dict) -> None:
    """Asks the user to confirm a mutating operation against a live network."""
    print(f"\n{operation} on '{network}'")
    for name, value in details.items():
        print(f"\t{name}={value}")
    answer = input(f"{operation} Y/N? ")
    if answer.lower().strip() == "n":
        print("Aborting!")
        exit(-1)
