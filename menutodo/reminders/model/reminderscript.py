"""
AppleScripts for Apple Reminders.

Scripts which return several values separate fields with ``character id 31`` (unit separator) and records with
``character id 30`` (record separator). Dates are returned as ``YYYY-MM-DD HH:MM:SS``. Scripts which change a reminder or
list return ``not_found`` if it no longer exists.
"""

FIELD_SEPARATOR = '\x1f'
RECORD_SEPARATOR = '\x1e'
NOT_FOUND = 'not_found'

#: Handlers shared by scripts which read or write dates.
_date_handlers = '''
on isoDate(d)
    if d is missing value then return "missing value"
    set y to (year of d) as integer
    set m to (month of d) as integer
    return (y as text) & "-" & my pad(m) & "-" & my pad(day of d) & " " & my pad(hours of d) & ":" & my pad(minutes of d) & ":" & my pad(seconds of d)
end isoDate

on pad(n)
    return text -2 thru -1 of ("0" & (n as text))
end pad

on stringToDate(s)
    set d to current date
    set day of d to 1
    set year of d to (text 1 thru 4 of s) as integer
    set month of d to (text 6 thru 7 of s) as integer
    set day of d to (text 9 thru 10 of s) as integer
    set hours of d to (text 12 thru 13 of s) as integer
    set minutes of d to (text 15 thru 16 of s) as integer
    set seconds of d to (text 18 thru 19 of s) as integer
    return d
end stringToDate

on textOrMissing(t)
    if t is missing value then return "missing value"
    return t as text
end textOrMissing
'''

#: Check that Reminders can be scripted. The first run triggers the Automation permission prompt.
request_access_script = '''tell application "Reminders"
    return count of lists
end tell'''

#: Get the list of reminder lists.
get_reminder_lists_script = '''set fs to character id 31
set rs to character id 30
tell application "Reminders"
    set output to ""
    repeat with r_list in (get every list)
        set list_color to "missing value"
        try
            set c to color of r_list
            if c is not missing value then set list_color to c as text
        end try
        set output to output & (id of r_list) & fs & (name of r_list) & fs & list_color & rs
    end repeat
    return output
end tell'''

#: Get the reminders in the list with the given ID, or in every list if the ID is empty.
get_reminders_script = '''on run argv
set filter_id to item 1 of argv
set fs to character id 31
set rs to character id 30
set output to ""
tell application "Reminders"
    if filter_id is "" then
        set r_lists to every list
    else
        if not (exists list id filter_id) then return "not_found"
        set r_lists to {list id filter_id}
    end if
    repeat with r_list in r_lists
        set list_id to id of r_list
        set r_ids to id of every reminder of r_list
        set r_names to name of every reminder of r_list
        set r_completed to completed of every reminder of r_list
        set r_due to due date of every reminder of r_list
        set r_created to creation date of every reminder of r_list
        set r_priority to priority of every reminder of r_list
        set r_body to body of every reminder of r_list
        repeat with i from 1 to count of r_ids
            set rLine to (item i of r_ids) & fs & my textOrMissing(item i of r_names) & fs & ((item i of r_completed) as text) & fs
            set rLine to rLine & my isoDate(item i of r_due) & fs & my isoDate(item i of r_created) & fs
            set rLine to rLine & ((item i of r_priority) as text) & fs & my textOrMissing(item i of r_body) & fs & list_id & rs
            set output to output & rLine
        end repeat
    end repeat
end tell
return output
end run
''' + _date_handlers

#: Add a new reminder to the list with the given ID, or to the default list if the ID is empty.
add_reminder_script = '''on run argv
set {r_name, r_list} to {item 1, item 2} of argv
tell application "Reminders"
    if r_list is "" then
        set target_list to default list
    else
        if not (exists list id r_list) then return "not_found"
        set target_list to list id r_list
    end if
    set theReminder to make new reminder at end of target_list with properties {name:r_name}
    return (id of theReminder) & (character id 31) & (id of target_list)
end tell
end run'''

#: Mark the reminder with the given ID as completed or not completed.
set_completed_script = '''on run argv
set {r_id, r_completed} to {item 1, item 2} of argv
tell application "Reminders"
    if not (exists reminder id r_id) then return "not_found"
    set completed of reminder id r_id to (r_completed is "true")
end tell
return "ok"
end run'''

#: Update the name, body and/or due date of the reminder with the given ID. Each value is only written if the flag
#: preceding it is 'true'.
update_reminder_script = '''on run argv
set {r_id, r_set_name, r_name, r_set_body, r_body, r_set_due, r_due} to {item 1, item 2, item 3, item 4, item 5, item 6, item 7} of argv
tell application "Reminders"
    if not (exists reminder id r_id) then return "not_found"
    set theReminder to reminder id r_id
    if r_set_name is "true" then set name of theReminder to r_name
    if r_set_body is "true" then set body of theReminder to r_body
    if r_set_due is "true" then set due date of theReminder to my stringToDate(r_due)
end tell
return "ok"
end run
''' + _date_handlers

#: Move the reminder with the given ID to another list.
move_reminder_script = '''on run argv
set {r_id, r_list} to {item 1, item 2} of argv
tell application "Reminders"
    if not (exists reminder id r_id) then return "not_found"
    if not (exists list id r_list) then return "not_found"
    move reminder id r_id to list id r_list
end tell
return "ok"
end run'''

#: Delete the reminder with the given ID.
delete_reminder_script = '''on run argv
set r_id to item 1 of argv
tell application "Reminders"
    if not (exists reminder id r_id) then return "not_found"
    delete reminder id r_id
end tell
return "ok"
end run'''

#: Create a new reminder list in the account holding the default list, or the first account if there is none.
create_reminder_list_script = '''on run argv
set {l_name, l_color} to {item 1, item 2} of argv
tell application "Reminders"
    try
        set target_account to container of default list
    on error
        set target_account to first account
    end try
    set theList to make new list at target_account with properties {name:l_name}
    if l_color is not "" then
        try
            set color of theList to l_color
        end try
    end if
    return id of theList
end tell
end run'''

#: Delete the list with the given ID, along with its reminders.
delete_list_script = '''on run argv
set l_id to item 1 of argv
tell application "Reminders"
    if not (exists list id l_id) then return "not_found"
    delete list id l_id
end tell
return "ok"
end run'''

#: Summarise every list, its colour and the modification dates of its reminders. Used to detect changes made outside
#: MenuTodo.
fingerprint_script = '''set fs to character id 31
set rs to character id 30
set output to ""
tell application "Reminders"
    repeat with r_list in (get every list)
        set m_dates to modification date of every reminder of r_list
        set list_color to "missing value"
        try
            set c to color of r_list
            if c is not missing value then set list_color to c as text
        end try
        set output to output & (id of r_list) & fs & (name of r_list) & fs & list_color & fs
        set output to output & ((count of m_dates) as text) & fs
        repeat with m in m_dates
            set output to output & my isoDate(contents of m) & ","
        end repeat
        set output to output & rs
    end repeat
end tell
return output
''' + _date_handlers
