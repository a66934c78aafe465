# city and state names are stored lowercase, "&" spelled as "and"

metro_cities = [
    "mumbai",
    "bangalore",
    "bengaluru",
    "kolkata",
    "chennai",
    "hyderabad",
    "pune",
    "ahmedabad",
]

# destination states priced as special zone irrespective of origin
special_zone = [
    "arunachal pradesh",
    "assam",
    "manipur",
    "meghalaya",
    "mizoram",
    "nagaland",
    "tripura",
    "sikkim",
    "jammu and kashmir",
    "ladakh",
    "himachal pradesh",
    "andaman and nicobar islands",
]


def normalize_place(name) -> str:
    if not name:
        return ""
    return " ".join(str(name).lower().replace("&", " and ").split())
