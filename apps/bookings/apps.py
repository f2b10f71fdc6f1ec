from django.apps import AppConfig


class BookingsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.bookings"

    def ready(self) -> None:
        from shared.application.message_bus import message_bus

        from .application import command_handlers as commands
        from .application.event_handlers import enqueue_notification
        from .domain import events

        handlers = {
            commands.CreateReservationCommand: commands.CreateReservationHandler(),
            commands.ApproveBookingCommand: commands.ApproveBookingHandler(),
            commands.RejectBookingCommand: commands.RejectBookingHandler(),
            commands.CancelBookingCommand: commands.CancelBookingHandler(),
            commands.RecordPaymentCommand: commands.RecordPaymentHandler(),
            commands.CheckInBookingCommand: commands.CheckInBookingHandler(),
            commands.CheckOutBookingCommand: commands.CheckOutBookingHandler(),
        }
        for command_type, handler in handlers.items():
            message_bus.register_command_handler(command_type, handler.handle, replace=True)

        for event_type in (
            events.BookingCreated,
            events.BookingApproved,
            events.BookingRejected,
            events.BookingCancelled,
            events.BookingCheckedIn,
            events.BookingCheckedOut,
            events.PaymentRecorded,
        ):
            message_bus.register_event_handler(event_type, enqueue_notification)
