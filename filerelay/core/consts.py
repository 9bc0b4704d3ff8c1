APP_NAME = "filerelay"
CLI_BIN = "filerelay"
DEEP_LINK_TEMPLATE = "https://t.me/{username}?start={token}"
BATCH_ID_PREFIX = "batch"
MEMBER_STATUSES = ("member", "administrator", "owner", "creator")


class Commands:
    START = "start"
    HELP = "help"
    START_BATCH = "startbatch"
    END_BATCH = "endbatch"


class Texts:
    """Mensajes que ve el usuario en Telegram."""

    WELCOME = (
        "<blockquote>Hello, <b>Dear User</b>!</blockquote>\n\n"
        "<b>Unlimited Storage Telegram Bot</b>\n\n"
        "Maximize your storage capabilities with the Unlimited Storage Telegram bot. "
        "Easily store and share your files with friends and colleagues. "
        "Type /help to explore more features and benefits."
    )
    HELP = (
        "<b>Help Menu:</b>\n"
        "1. <b>/start</b> - Start the bot or retrieve files with a link.\n"
        "2. <b>/startbatch</b> - Start a batch mode for uploading multiple files.\n"
        "3. <b>/endbatch</b> - End the batch and receive a link to the files.\n"
        "4. <b>/help</b> - Show this help message.\n\n"
        "You can send files directly to this chat, and I will generate a link for them. "
        "If you're in batch mode, send multiple files and receive one link for the entire batch."
    )
    JOIN_REQUIRED = (
        "<b>Notice:</b> Due to high server load, access to this free service is "
        "restricted to users who are subscribed to our channel. "
        "Please subscribe to gain access.\n\nPlease click the button below:"
    )
    JOIN_BUTTON = "Join our channel"
    BATCH_STARTED = "Batch mode started. Send the files you want to batch together, and end with /endbatch."
    BATCH_ALREADY_ACTIVE = "A batch is already in progress. Finish it with /endbatch before starting a new one."
    BATCH_EMPTY = "No batch in progress or no files have been added."
    BATCH_SAVED = "Batch saved! Here's your link: {link}"
    FILE_ADDED_TO_BATCH = "File added to batch! ({name})"
    FILE_SAVED = "File saved! Here's your link: {link}"
    SAVE_FAILED = "Something went wrong while saving your file. Please try again."
    FILE_NOT_FOUND = "No file found with that link."
    FILE_TYPE_UNKNOWN = "File type not recognized."


class COLORS:
    INFO = "dim cyan"
    WARNING = "magenta"
    ERROR = "bold red"
    SUCCESS = "bold green"
    PROGRESS = "italic blue"

    # bold blue para títulos de tablas
    TABLE_TITLE = "bold blue"
