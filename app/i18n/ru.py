# -*- coding: utf-8 -*-
"""Russian (ru) strings. Canonical language."""

LANG = {
    "common.back": "← Назад",
    "common.month_one": "месяц",
    "common.month_few": "месяца",
    "common.month_many": "месяцев",
    "common.someone": "Пользователь",

    # Главное меню
    "menu.title": "Главное меню:",
    "menu.subscription_status": "{emoji} СТАТУС ПОДПИСКИ",
    "menu.how_to_use": "📘 КАК ПОЛЬЗОВАТЬСЯ",
    "menu.faq": "❓ FAQ",
    "menu.referals": "🤝 РЕФЕРАЛЫ",
    "menu.gifts": "🎁 ПОДАРКИ",
    "menu.countries": "🌍 СТРАНЫ",
    "menu.settings": "⚙️ НАСТРОЙКИ",
    "menu.section.settings": "Настройки: язык, уведомления и параметры аккаунта.",
    "start.welcome_new": (
        "Поздравляем, вы зарегистрированы! Как новому пользователю, "
        "вам начислено {days} дня бесплатной подписки."
    ),
    "start.welcome_back": "Добро пожаловать в Starlink.",

    # Ответы на нажатия кнопок
    "callback.opening_payment": "Открываем оплату...",
    "callback.opening_section": "Открываем раздел...",
    "callback.opening_answer": "Открываем ответ...",
    "callback.processing_prolongation": "Продлеваем подписку...",
    "callback.opening_referrals": "Открываем реферальную программу...",
    "callback.loading_vps": "Загружаем список серверов...",
    "callback.sending_configs": "Отправляем конфигурации...",
    "callback.opening_guide": "Открываем инструкцию...",
    "callback.fetching_status": "Получаем статус подписки...",
    "callback.loading_countries": "Загружаем страны...",
    "callback.opening_faq": "Открываем FAQ...",
    "callback.opening_platforms": "Открываем список устройств...",
    "callback.opening_gifts": "Открываем подарки...",
    "callback.activating_gift": "Активируем подарок...",
    "callback.unknown": "Неизвестное действие.",

    # Покупка
    "buy.choose_method": "Выберите способ оплаты:",
    "buy.method_stars": "⭐ Telegram Stars",
    "buy.method_tbd": "TBD",
    "buy.method_not_implemented": "Этот способ оплаты пока недоступен.",
    "buy.plans_unavailable": "Планы оплаты пока недоступны. Попробуйте позже.",
    "buy.plans_load_failed": "Не удалось загрузить тарифы. Попробуйте позже.",
    "buy.choose_stars_plan": "Выберите тариф Telegram Stars:",
    "buy.plan_button": "{months} {months_word} • {stars} ⭐",
    "buy.plan_load_failed": "Не удалось загрузить тариф. Попробуйте позже.",
    "buy.plan_unavailable": "Выбранный тариф недоступен. Обновите меню и попробуйте снова.",
    "invoice.title": "VPN на {months} {months_word}",
    "invoice.description": "Оплата VPN подписки на {months} {months_word} звёздами Telegram.",
    "invoice.gift_title": "Подарок: VPN на {months} {months_word}",
    "invoice.gift_description": "Подарочная VPN подписка на {months} {months_word} для {recipient}.",

    # Платежи
    "payment.precheckout_rejected": "Проверка платежа не пройдена. Повторите оплату из меню бота.",
    "payment.error_contact_support": "Платеж получен, но произошла ошибка, свяжитесь с поддержкой.",
    "payment.success": "✅ Платеж успешно выполнен звездами.",
    "payment.paid_for": "Оплачено на: {months} {months_word}.",
    "payment.status_live": "🟢 Статус подписки: LIVE",
    "payment.valid_until": "Действительна до: {date}",
    "payment.gift_sent": "🎁 Подарок на {months} {months_word} отправлен пользователю {recipient}.",

    # FAQ
    "faq.choose": "Выберите вопрос:",
    "faq.button_email": "📧 Связаться по почте",
    "faq.button_chat": "💬 Вступайте в чат",
    "faq.button_support": "🛟 Написать в поддержку",
    "faq.button_rules": "📜 Правила сервиса",
    "faq.button_offer": "📄 Публичная оферта",
    "faq.email": "Вы можете написать нам на почту {email}",
    "faq.rules": (
        "☑️ Продолжая пользоваться нашим сервисом, вы подтверждаете согласие со следующими условиями:\n"
        "• Не нарушать законы Российской Федерации.\n"
        "• Не передавать и не публиковать свой ключ доступа. При нарушении ключ будет отключён, "
        "а аккаунт заблокирован.\n"
        "• Не заниматься спамом и флудом в боте и службе поддержки. Обращения обрабатываются "
        "по очереди, срок ответа может составлять до 48 часов."
    ),

    # Рефералы
    "referral.profile_missing": "Профиль не найден. Используйте /start, затем попробуйте снова.",
    "referral.link_not_configured": "BOT_USERNAME не настроен",
    "referral.program": (
        "👥 Реферальная программа\n\n"
        "За каждого приглашенного клиента при первой оплате вы получаете {first_percent}%\n"
        "За каждое последующее продление {repeat_percent}%\n\n"
        "На заработанные деньги вы можете продлить свою подписку или вывести через USDT\n\n"
        "Минимальная сумма вывода {min_withdrawal}$\n\n"
        "Ваша реферальная ссылка:\n"
        "{link}\n\n"
        "• Всего заработано : {earned}$\n"
        "• Количество ваших рефералов: {count}"
    ),
    "referral.button_prolong": "🔄 Продлить подписку",
    "referral.button_withdraw": "💬 Связаться с поддержкой для вывода",
    "referral.insufficient": "Пока что недостаточно средств для оплаты подписки.",
    "referral.choose_period": "Выберите период продления за реферальный баланс.\nТекущий баланс: {balance}$",
    "referral.plan_button": "{months} {months_word} • {usdt}$",
    "referral.plan_unavailable": "Выбранный тариф недоступен. Попробуйте снова.",
    "referral.prolong_success": "✅ Подписка успешно продлена за реферальный баланс.",
    "referral.prolong_period": "Период: {months} мес.",
    "referral.prolong_debited": "Списано: {amount}$",
    "referral.prolong_balance": "Остаток баланса: {balance}$",
    "referral.prolong_until": "Подписка до: {date}",
    "referral.prolong_failed": "Не удалось продлить подписку с реферального баланса. Попробуйте позже.",

    # Статус подписки
    "status.missing": "🔴 Подписка не найдена\nНиже вы можете приобрести подписку.",
    "status.live": "🟢 Статус подписки: LIVE",
    "status.ending": "🟠 Статус подписки: ENDING",
    "status.absent": "🔴 Статус подписки: Отсутствует",
    "status.until": "Подписка до: {date}",
    "status.button_buy": "🛒 Приобрести подписку",
    "status.button_renew": "🔄 Продлить подписку",

    # Страны / серверы
    "countries.subscription_required": (
        "ЧТОБЫ ПОСМОТРЕТЬ СЕРВЕРА НУЖНО КУПИТЬ ПОДПИСКУ, ВОТ КАК ЭТО МОЖНО СДЕЛАТЬ:"
    ),
    "countries.empty": "Список стран пока пуст.",
    "countries.title": "Список стран:",
    "countries.no_servers": "Для страны {country} серверы пока не добавлены.",
    "countries.servers_title": "Серверы в {country}:",
    "countries.config_not_found": "Конфигурация сервера не найдена.",
    "countries.config_empty": "Для этого сервера пока нет конфигов.",
    "countries.config_intro": "Ссылки для приложения:",
    "countries.load_failed": "Не удалось загрузить список серверов. Попробуйте позже.",

    # Подарки и промокоды
    "gift.menu_title": "🎁 Подарки и промокоды",
    "gift.button_my": "🎁 Мои подарки",
    "gift.button_give": "💝 Подарить подписку",
    "gift.button_promo": "🏷 Ввести промокод",
    "gift.list_empty": "У вас пока нет подарков.",
    "gift.list_title": "Ваши подарки:",
    "gift.item_button": "{number}. {months} {months_word} от {giver}",
    "gift.view": "🎁 Подарок от {giver}\nСрок: {months} {months_word}\nПолучен: {date}",
    "gift.button_activate": "✅ Активировать",
    "gift.not_found": "Подарок не найден. Откройте список подарков заново.",
    "gift.activated": "✅ Подарок активирован!\nПодписка до: {date}",
    "gift.activate_failed": "Не удалось активировать подарок. Попробуйте позже.",
    "gift.pick_recipient": "Выберите пользователя, которому хотите подарить подписку:",
    "gift.pick_recipient_button": "👤 Выбрать получателя",
    "gift.recipient_self": "Нельзя подарить подписку самому себе.",
    "gift.recipient_selected": "Получатель выбран.",
    "gift.choose_method": "Подарок для {recipient}. Выберите способ оплаты:",
    "gift.choose_plan": "Выберите срок подарка:",
    "gift.received": (
        "🎁 {giver} подарил(а) вам подписку на {months} {months_word}!\n"
        "Откройте раздел «Подарки», чтобы активировать."
    ),
    "gift.promo_prompt": "Отправьте промокод ответом на это сообщение:",
    "gift.promo_not_found": "Промокод не найден.",
    "gift.promo_found": "🏷 Промокод {code} от {bloger}: скидка {discount}%.",
    "gift.promo_failed": "Не удалось проверить промокод. Попробуйте позже.",

    # Инструкции
    "howto.choose_device": "Выберите устройство:",
    "howto.ios": (
        "Скачай приложение для айфона по ссылке:\n"
        "https://apps.apple.com/ge/app/fair-vpn/id1533873488\n\n"
        "И подключись по инструкции с картинки.\n"
        "Или воспользуйся запасным приложением:\n"
        "https://apps.apple.com/ge/app/v2raytun/id6476628951"
    ),
    "howto.android": (
        "Скачай приложение для андроида по ссылке:\n"
        "https://play.google.com/store/apps/details?id=com.v2raytun.android\n\n"
        "Если у тебя нет PlayMarket - скачай приложение здесь:\n"
        "https://apkpure.com/ru/v2raytun/com.v2raytun.android\n\n"
        "Скопируй свою ссылку на VPN\n"
        "И подключись по инструкции с картинки"
    ),
    "howto.macos": (
        "1. Скачайте v2RayTun из AppStore:\n"
        "https://apps.apple.com/ge/app/v2raytun/id6476628951\n"
        "или запасное приложение:\n"
        "https://apps.apple.com/ge/app/fair-vpn/id1533873488\n\n"
        "2. Откройте приложение v2RayTun и нажмите + в правом верхнем углу.\n\n"
        "3. Выберите опцию Import from clipboard (Импорт из буфера обмена).\n\n"
        "4. Для подключения нажмите кнопку питания и разрешите добавить конфигурацию VPN "
        "в настройках устройства."
    ),
    "howto.windows": (
        "Для установки VPN windows приложения откройте ссылку:\n"
        "https://github.com/2dust/v2rayN/releases/latest\n\n"
        "1) Далее пролистайте вниз страницы и выберите версию программы "
        "“v2rayN-windows-64-SelfContained.zip”\n"
        "2) Нажмите в верхнем левом углу программы “Servers” и "
        "“Import Share Links from clipboard (Ctrl +V)”\n"
        "3) Осталось только включить VPN нажав кнопку “Enable Tun”"
    ),
    "howto.android_tv.1": "Качаем приложение v2RayTun на телевизор",
    "howto.android_tv.2": "Устанавливаем v2RayTun",
    "howto.android_tv.3": "Открываем приложение v2RayTun после установки",
    "howto.android_tv.4": "В приложении v2RayTun нажимаем на \"Управление\"",
    "howto.android_tv.5": "Выбираем ручной ввод",
    "howto.android_tv.6": (
        "Открываем приложение Google TV на телефоне и подключаемся к телевизору.\n\n"
        "(скачать из App Store / Google если его нет - с его помощью вы легко сможете вставить "
        "текст на телевизор с телефона и использовать свой телефон как пульт)"
    ),
    "howto.android_tv.7": "Вставляем конфигурацию на телефоне и жмём ок",
}
