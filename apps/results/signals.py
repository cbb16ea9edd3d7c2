from django.dispatch import Signal

# Sent inside the freeze transaction. kwargs: semester
semester_frozen = Signal()

# Sent after a semester's results are published. kwargs: semester, notify_students
results_published = Signal()
