from django.apps import AppConfig


class ConcernsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.concerns"

    def ready(self) -> None:
        from apps.bookings.application.event_handlers import enqueue_notification
        from shared.application.message_bus import message_bus

        from .application import command_handlers as commands
        from .domain import events

        handlers = {
            commands.SubmitConcernCommand: commands.SubmitConcernHandler(),
            commands.UpdateConcernStatusCommand: commands.UpdateConcernStatusHandler(),
            commands.AddConcernNoteCommand: commands.AddConcernNoteHandler(),
        }
        for command_type, handler in handlers.items():
            message_bus.register_command_handler(command_type, handler.handle, replace=True)

        message_bus.register_event_handler(events.ConcernSubmitted, enqueue_notification)
        message_bus.register_event_handler(events.ConcernStatusChanged, enqueue_notification)
