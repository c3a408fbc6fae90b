"""Reply texts sent by the bot."""

GREETING = "Hey there 🤙"
MEMBERS_HINT = "Use /getmembers to see everyone taking part in the game"
WISHLIST_HINT = "Use /setwishlist to tell your Santa what you would like"
TAKE_RECIPIENT_HINT = (
    "Use /takerecipient to find out who you are giving a gift to. "
    "No rush though, wait until everyone has joined the game"
)

JOIN_NOTICE = "{name} joined the game 👏"
MEMBERS_HEADER = "Participants:"
WISHLIST_MARKER = "📃"
ASSIGNED_MARKER = "🎅"
DATA_CLEARED = "Database cleared"

WISHLIST_PROMPT = "Write what you would (and would not) like to get in your next message"
RECIPIENT_MESSAGE_PROMPT = "Write what you want to pass on to your giftee in your next message"
SANTA_MESSAGE_PROMPT = "Write what you want to pass on to your Santa in your next message"

WISHLIST_SAVED = "Got it! Your wishes will be taken into account, probably..."
WISHLIST_CHANGED_NOTICE = "Your giftee changed their wish list"
RECIPIENT_MESSAGE_NOTICE = "Your Santa wants to tell you something"
SANTA_MESSAGE_NOTICE = "Your giftee wants to tell you something"
MESSAGE_RELAYED = "Passed your message on"
NO_RECIPIENT = "You don't have a giftee yet, use /takerecipient first"
NO_SANTA = "Nobody has picked you as their giftee yet"
SOMETHING_WENT_WRONG = "Something went wrong :("

RECIPIENT_ASSIGNED = "I found you a match, and it is {name} 🎉🎉🎉"
RECIPIENT_WISHLIST = "<b>Your giftee's wishes 💁:\n</b>{wish_list}"
RECIPIENT_NO_WISHLIST = "Your giftee hasn't said what they want"
ALREADY_ASSIGNED = "You already have a match"
TRY_AGAIN = "Oops! Please try again"
