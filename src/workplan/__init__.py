"""workplan: turn a document into a work plan with derived views, a timeline and task reminders."""

__version__ = "0.1.0"
