from dataclasses import dataclass, field


@dataclass
class Thread:
    """
    The directional message log from sender to receiver.

    The read flag covers the whole thread and is reset whenever new
    content arrives.
    """

    sender: str
    receiver: str
    messages: list[str] = field(default_factory=list)
    read: bool = False
