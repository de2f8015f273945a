DEPARTMENTS = (
    "Computer Science", "Business Administration", "Engineering", "Medicine",
    "Arts & Humanities", "Social Sciences", "Natural Sciences", "Education",
    "Law", "Other",
)

ACADEMIC_YEARS = ("Freshman", "Sophomore", "Junior", "Senior", "Graduate", "PhD")

INTERESTS = (
    "Technology", "Business", "Arts", "Sports", "Science", "Music", "Photography",
    "Writing", "Volunteering", "Entrepreneurship", "Research", "Design", "Gaming",
    "Travel", "Food", "Fitness", "Networking", "Career", "Academic", "Social",
    "Workshop", "Conference", "Seminar", "Meetup", "Competition", "Exhibition",
)

# Event categories are the interest list plus a catch-all.
EVENT_CATEGORIES = INTERESTS + ("Other",)

CLUB_CATEGORIES = (
    "Academic", "Social", "Sports", "Volunteer", "Technology", "Arts",
    "Professional", "Other",
)

ROLES = ("user", "admin")

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"
APPROVAL_STATUSES = (STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED)

CLUB_PLACEHOLDER_IMAGE = "https://via.placeholder.com/300x200?text=Club+Image"
