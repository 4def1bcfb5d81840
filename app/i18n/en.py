# -*- coding: utf-8 -*-
"""English (en) strings."""

LANG = {
    "common.back": "← Back",
    "common.month_one": "month",
    "common.month_few": "months",
    "common.month_many": "months",
    "common.someone": "A user",

    "menu.title": "Main menu:",
    "menu.subscription_status": "{emoji} SUBSCRIPTION STATUS",
    "menu.how_to_use": "📘 HOW TO USE",
    "menu.faq": "❓ FAQ",
    "menu.referals": "🤝 REFERALS",
    "menu.gifts": "🎁 GIFTS",
    "menu.countries": "🌍 COUNTRIES",
    "menu.settings": "⚙️ SETTINGS",
    "menu.section.settings": "Settings: language, notifications and account options.",
    "start.welcome_new": (
        "Congratulations, you are registered! As a new user you get "
        "{days} days of free subscription."
    ),
    "start.welcome_back": "Welcome to Starlink.",

    "callback.opening_payment": "Opening payment...",
    "callback.opening_section": "Opening section...",
    "callback.opening_answer": "Opening answer...",
    "callback.processing_prolongation": "Processing prolongation...",
    "callback.opening_referrals": "Opening referral section...",
    "callback.loading_vps": "Loading VPS list...",
    "callback.sending_configs": "Sending configs...",
    "callback.opening_guide": "Opening guide...",
    "callback.fetching_status": "Fetching subscription status...",
    "callback.loading_countries": "Loading countries...",
    "callback.opening_faq": "Opening FAQ...",
    "callback.opening_platforms": "Opening platforms...",
    "callback.opening_gifts": "Opening gifts...",
    "callback.activating_gift": "Activating gift...",
    "callback.unknown": "Unknown action.",

    "buy.choose_method": "Choose payment method:",
    "buy.method_stars": "⭐ Telegram Stars",
    "buy.method_tbd": "TBD",
    "buy.method_not_implemented": "This payment method is not implemented yet.",
    "buy.plans_unavailable": "Payment plans are not available yet. Please try later.",
    "buy.plans_load_failed": "Failed to load plans. Please try later.",
    "buy.choose_stars_plan": "Choose Telegram Stars plan:",
    "buy.plan_button": "{months} {months_word} • {stars} ⭐",
    "buy.plan_load_failed": "Failed to load the plan. Please try later.",
    "buy.plan_unavailable": "The selected plan is unavailable. Refresh the menu and try again.",
    "invoice.title": "VPN {months} {months_word} plan",
    "invoice.description": "Telegram Stars payment for {months} {months_word} VPN subscription.",
    "invoice.gift_title": "Gift: VPN {months} {months_word} plan",
    "invoice.gift_description": "Gift VPN subscription for {months} {months_word} for {recipient}.",

    "payment.precheckout_rejected": "Payment validation failed. Please retry from bot menu.",
    "payment.error_contact_support": "Payment received, but an error occurred. Please contact support.",
    "payment.success": "✅ Payment completed with Telegram Stars.",
    "payment.paid_for": "Paid for: {months} {months_word}.",
    "payment.status_live": "🟢 Subscription status: LIVE",
    "payment.valid_until": "Valid until: {date}",
    "payment.gift_sent": "🎁 A {months} {months_word} gift was sent to {recipient}.",

    "faq.choose": "Choose a question:",
    "faq.button_email": "📧 Contact by email",
    "faq.button_chat": "💬 Join the chat",
    "faq.button_support": "🛟 Write to support",
    "faq.button_rules": "📜 Service rules",
    "faq.button_offer": "📄 Public offer",
    "faq.email": "You can email us at {email}",
    "faq.rules": (
        "☑️ By continuing to use our service, you confirm that you agree to the following terms:\n"
        "• Do not violate the laws of the Russian Federation.\n"
        "• Do not share or publish your access key. If you break this rule, the key will be "
        "deactivated and your account will be blocked.\n"
        "• Do not spam or flood the bot or support chat. Requests are handled in order, and the "
        "response time can be up to 48 hours."
    ),

    "referral.profile_missing": "Profile not found. Use /start and try again.",
    "referral.link_not_configured": "BOT_USERNAME is not configured",
    "referral.program": (
        "👥 Referral program\n\n"
        "For every invited client you get {first_percent}% of their first payment\n"
        "And {repeat_percent}% of every renewal\n\n"
        "You can spend the earned money on your subscription or withdraw it in USDT\n\n"
        "Minimum withdrawal is {min_withdrawal}$\n\n"
        "Your referral link:\n"
        "{link}\n\n"
        "• Total earned: {earned}$\n"
        "• Number of referrals: {count}"
    ),
    "referral.button_prolong": "🔄 Renew subscription",
    "referral.button_withdraw": "💬 Contact support to withdraw",
    "referral.insufficient": "Not enough funds to pay for a subscription yet.",
    "referral.choose_period": "Choose a renewal period paid from referral balance.\nCurrent balance: {balance}$",
    "referral.plan_button": "{months} {months_word} • {usdt}$",
    "referral.plan_unavailable": "The selected plan is unavailable. Please try again.",
    "referral.prolong_success": "✅ Subscription renewed from referral balance.",
    "referral.prolong_period": "Period: {months} mo.",
    "referral.prolong_debited": "Debited: {amount}$",
    "referral.prolong_balance": "Balance left: {balance}$",
    "referral.prolong_until": "Subscription until: {date}",
    "referral.prolong_failed": "Failed to renew from referral balance. Please try later.",

    "status.missing": "🔴 Subscription not found\nYou can buy a subscription below.",
    "status.live": "🟢 Subscription status: LIVE",
    "status.ending": "🟠 Subscription status: ENDING",
    "status.absent": "🔴 Subscription status: None",
    "status.until": "Subscription until: {date}",
    "status.button_buy": "🛒 Buy subscription",
    "status.button_renew": "🔄 Renew subscription",

    "countries.subscription_required": "TO SEE THE SERVERS YOU NEED A SUBSCRIPTION, HERE IS HOW TO GET ONE:",
    "countries.empty": "The country list is empty for now.",
    "countries.title": "Countries:",
    "countries.no_servers": "No servers have been added for {country} yet.",
    "countries.servers_title": "Servers in {country}:",
    "countries.config_not_found": "Server configuration not found.",
    "countries.config_empty": "This server has no configs yet.",
    "countries.config_intro": "Links for the app:",
    "countries.load_failed": "Failed to load servers. Please try later.",

    "gift.menu_title": "🎁 Gifts and promo codes",
    "gift.button_my": "🎁 My gifts",
    "gift.button_give": "💝 Gift a subscription",
    "gift.button_promo": "🏷 Enter promo code",
    "gift.list_empty": "You have no gifts yet.",
    "gift.list_title": "Your gifts:",
    "gift.item_button": "{number}. {months} {months_word} from {giver}",
    "gift.view": "🎁 Gift from {giver}\nDuration: {months} {months_word}\nReceived: {date}",
    "gift.button_activate": "✅ Activate",
    "gift.not_found": "Gift not found. Please reopen your gift list.",
    "gift.activated": "✅ Gift activated!\nSubscription until: {date}",
    "gift.activate_failed": "Failed to activate the gift. Please try later.",
    "gift.pick_recipient": "Choose the user you want to gift a subscription to:",
    "gift.pick_recipient_button": "👤 Choose recipient",
    "gift.recipient_self": "You cannot gift a subscription to yourself.",
    "gift.recipient_selected": "Recipient selected.",
    "gift.choose_method": "Gift for {recipient}. Choose payment method:",
    "gift.choose_plan": "Choose gift duration:",
    "gift.received": (
        "🎁 {giver} gifted you a {months} {months_word} subscription!\n"
        "Open the Gifts section to activate it."
    ),
    "gift.promo_prompt": "Send the promo code as a reply to this message:",
    "gift.promo_not_found": "Promo code not found.",
    "gift.promo_found": "🏷 Promo code {code} from {bloger}: {discount}% discount.",
    "gift.promo_failed": "Failed to check the promo code. Please try later.",

    "howto.choose_device": "Choose your device:",
    "howto.ios": (
        "Download the iPhone app:\n"
        "https://apps.apple.com/ge/app/fair-vpn/id1533873488\n\n"
        "And connect following the picture.\n"
        "Or use the backup app:\n"
        "https://apps.apple.com/ge/app/v2raytun/id6476628951"
    ),
    "howto.android": (
        "Download the Android app:\n"
        "https://play.google.com/store/apps/details?id=com.v2raytun.android\n\n"
        "No Play Market? Download the app here:\n"
        "https://apkpure.com/ru/v2raytun/com.v2raytun.android\n\n"
        "Copy your VPN link\n"
        "And connect following the picture"
    ),
    "howto.macos": (
        "1. Download v2RayTun from the App Store:\n"
        "https://apps.apple.com/ge/app/v2raytun/id6476628951\n"
        "or the backup app:\n"
        "https://apps.apple.com/ge/app/fair-vpn/id1533873488\n\n"
        "2. Open v2RayTun and tap + in the top right corner.\n\n"
        "3. Choose Import from clipboard.\n\n"
        "4. Tap the power button to connect and allow adding the VPN configuration."
    ),
    "howto.windows": (
        "To install the Windows VPN app open:\n"
        "https://github.com/2dust/v2rayN/releases/latest\n\n"
        "1) Scroll down and pick “v2rayN-windows-64-SelfContained.zip”\n"
        "2) Click “Servers” in the top left corner and "
        "“Import Share Links from clipboard (Ctrl +V)”\n"
        "3) Turn the VPN on with the “Enable Tun” button"
    ),
    "howto.android_tv.1": "Download v2RayTun on your TV",
    "howto.android_tv.2": "Install v2RayTun",
    "howto.android_tv.3": "Open v2RayTun after installation",
    "howto.android_tv.4": "In v2RayTun press \"Manage\"",
    "howto.android_tv.5": "Choose manual input",
    "howto.android_tv.6": (
        "Open the Google TV app on your phone and connect to the TV.\n\n"
        "(get it from the App Store / Google Play if you don't have it: it lets you paste text "
        "to the TV from your phone and use the phone as a remote)"
    ),
    "howto.android_tv.7": "Paste the configuration on your phone and press OK",
}
