from enum import Enum


class ClientRoleEnum(str, Enum):
    member = "member"
    admin = "admin"


class PlatformEnum(str, Enum):
    instagram = "Instagram"
    youtube = "YouTube"
    tiktok = "TikTok"
    twitch = "Twitch"
    kick = "Kick"


class SortDirectionEnum(str, Enum):
    asc = "asc"
    desc = "desc"
