from learning_analytics.models.academic import (
    Course,
    CourseModule,
    Discipline,
    QuestionSet,
    Question,
    Classroom,
)
from learning_analytics.models.student import Student, StudentActivityLog
from learning_analytics.models.assessment import (
    Test,
    TestAttempt,
    FlashcardSession,
    FlashcardSessionStatus,
)
