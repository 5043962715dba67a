"""Chat message bodies sent to drivers and passengers."""
from utils.helper import format_schedule

ROUTE_LABELS = {
    "nvk-guk": "NVK → GUK",
    "guk-nvk": "GUK → NVK",
}


def route_label(route):
    return ROUTE_LABELS.get(route, route or "")


MARKDOWN_SPECIAL = ("\\", "_", "*", "`", "[")


def escape_markdown(text):
    """Escape user text for the legacy Markdown parse mode."""
    text = str(text)
    for char in MARKDOWN_SPECIAL:
        text = text.replace(char, "\\" + char)
    return text


def _username(username):
    if not username:
        return ""
    return username if username.startswith("@") else f"@{username}"


def create_booking_request_body(ride, passenger_name, passenger_username=None):
    contact = f" ({_username(passenger_username)})" if passenger_username else ""
    return f"""🚗 New booking for your ride!

Passenger: {passenger_name}{contact}
Route: {route_label(ride.get('route'))}
Time: {format_schedule(ride.get('departure_date'), ride.get('departure_time'))}
Seats left: {ride.get('available_seats')}/{ride.get('total_seats')}

Feel free to contact the passenger to agree on the details.""".strip()


def create_ride_closed_body(ride):
    return f"""❌ Ride cancelled

Driver: {ride.get('driver_name') or '—'}
Route: {route_label(ride.get('route'))}
Time: {format_schedule(ride.get('departure_date'), ride.get('departure_time'))}

The driver has closed this ride, your booking was removed.""".strip()


def create_ride_expired_body(ride):
    return f"""⌛ Ride finished

Route: {route_label(ride.get('route'))}
Time: {format_schedule(ride.get('departure_date'), ride.get('departure_time'))}

This ride has departed and was removed from the list.""".strip()


def create_driver_rides_body(rides):
    if not rides:
        return "🚗 You have no active rides yet.\n\nOpen the app and post your first ride!"

    body = "🚗 *Your active rides:*\n\n"
    for index, ride in enumerate(rides, start=1):
        body += f"{index}. *{escape_markdown(route_label(ride['route']))}*\n"
        body += f"   📅 {format_schedule(ride.get('departure_date'), ride.get('departure_time'))}\n"
        body += f"   👥 Seats: {ride['available_seats']}/{ride['total_seats']}\n"
        if ride.get("price") is not None:
            body += f"   💰 {ride['price']} ₽\n"
        body += f"   📋 Bookings: {ride['bookings_count']}\n\n"
    body += "Manage your rides in the app 👇"
    return body


def create_passenger_bookings_body(bookings):
    if not bookings:
        return "🎫 You have no bookings yet.\n\nOpen the app to find a ride!"

    body = "🎫 *Your bookings:*\n\n"
    for index, booking in enumerate(bookings, start=1):
        body += f"{index}. *{escape_markdown(route_label(booking['ride_route']))}*\n"
        body += f"   📅 {format_schedule(booking.get('ride_date'), booking.get('ride_time'))}\n"
        body += f"   🚗 Driver: {escape_markdown(booking['driver_name'] or '—')}\n"
        body += f"   💰 {booking['ride_price']} ₽\n"
        if booking.get("driver_username"):
            body += f"   📱 {escape_markdown(_username(booking['driver_username']))}\n"
        body += "\n"
    body += "Details are in the app 👇"
    return body


def create_start_body(first_name):
    return (
        f"👋 Hi, {escape_markdown(first_name or 'friend')}!\n\n"
        "🚗 *NVK-Driver* is the ride board for our dorm.\n\n"
        "• Find fellow travellers\n"
        "• Post your own ride\n"
        "• Book a seat with a driver\n\n"
        "👇 Tap the button below to start:"
    )


HELP_BODY = (
    "📖 *How to use*\n\n"
    "👤 *Passengers:* open the app, pick \"I'm a passenger\", choose a ride, "
    "book a seat and contact the driver on Telegram.\n\n"
    "🚗 *Drivers:* open the app, pick \"I'm a driver\", fill in route, time and price, "
    "then follow the bookings and close the ride when done.\n\n"
    "/start - open the bot\n"
    "/help - this message\n"
    "/myrides - my rides (driver)\n"
    "/mybookings - my bookings (passenger)\n"
    "/about - about the service"
)

ABOUT_BODY = (
    "ℹ️ *About NVK-Driver*\n\n"
    "🎓 Student rides for residents of the NVK dormitory.\n\n"
    "📍 *Popular routes:*\n"
    "• NVK ↔ GUK\n"
    "• NVK ↔ campus buildings"
)
