from enum import Enum


class Role(str, Enum):
    Admin = "admin"
    Principal = "principal"
    HOD = "hod"
    Faculty = "faculty"
    Student = "student"


class Scope(str, Enum):
    All = "all"
    Department = "department"
    Assigned = "assigned"
    Own = "own"


class Action(str, Enum):
    Create = "create"
    Read = "read"
    Update = "update"
    Delete = "delete"


class Page(str, Enum):
    Dashboard = "dashboard"
    Branches = "branches"
    Courses = "courses"
    Timetable = "timetable"
    Users = "users"
    Students = "students"
    Assignments = "assignments"
    Events = "events"
    Notices = "notices"
    Analytics = "analytics"
    Attendance = "attendance"
    Results = "results"


class ResourceKind(str, Enum):
    Section = "section"
    Timetable = "timetable"
    Attendance = "attendance"
    Assignment = "assignment"
    Course = "course"
    Student = "student"
    User = "user"
