"""Roster lookup errors."""


class ContactNotFoundError(Exception):
    """No student matches the requested name."""

    def __init__(self, first_name: str, last_name: str):
        self.first_name = first_name
        self.last_name = last_name
        super().__init__(f"Student {first_name} {last_name} not found")


class NoDestinationNumberError(Exception):
    """The student exists but has no phone number for the contact type."""

    def __init__(self, full_name: str, contact_type: str):
        self.full_name = full_name
        self.contact_type = contact_type
        super().__init__(f"No {contact_type} phone number found for {full_name}")
