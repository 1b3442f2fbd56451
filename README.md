# hopshell

An interactive shell for Linux. It has built-in commands for moving around
the file system, listing and searching directories, inspecting processes,
keeping a command history and controlling jobs. Any other command is started
as an external program.

## Installing

    pip install .

The package has no dependencies outside the standard library. To run the
tests:

    pip install .[test]
    pytest

## Starting

    hopshell

The directory the shell starts in becomes its home. It is shown as `~` in
the prompt, which has the form `<user@host:path>`. After a foreground
command that took more than two seconds, that command is shown once in the
next prompt.

Type `stop` to leave. On Ctrl-D every background job that is still running
is sent `SIGKILL` first, and the shell prints a closing message.

## Command lines

- `;` separates commands that run one after another.
- `&` after a command runs it in the background. Its pid is printed as
  `[pid] command`. Before each prompt, finished background jobs are reported
  as `command got terminated`, or in red with the signal number if a signal
  killed them.
- `|` joins commands into a pipeline. Each stage runs in its own process.
  An empty stage prints `Invalid use of pipe`.
- `<`, `>` and `>>` redirect input, output, and output in append mode. They
  apply to built-in commands as well as to external ones.
- Single or double quotes keep blanks inside one argument of an external
  command.

## Built-in commands

| Command | What it does |
|---|---|
| `hop [dir ...]` | Changes to each directory in turn and prints the current directory after each one. `~` is home, `-` is the previous directory, `.` stays put. |
| `reveal [-a] [-l] [path]` | Lists a directory, or describes a single file, in sorted order. `-a` includes hidden entries and `.`/`..`. `-l` prints mode, links, owner, group, size and modification time, after a `total` line of 1 KiB blocks. Directories are shown in blue and executables in green. A `~` path means home. |
| `seek [-d] [-f] [-e] term [dir]` | Searches the tree under `dir` (default: the current directory) for names that contain `term`. `-d` keeps only directories and `-f` only regular files; the two together print `Invalid flags!`. With `-e` and exactly one match, a file's contents are printed, or the shell changes into the matched directory. |
| `proclore [pid]` | Shows the pid, status (with `+` for the foreground process group), parent pid, virtual memory and executable path of a process. Without a pid it describes the shell itself. |
| `log` | Prints the stored command lines, oldest first. |
| `log purge` | Clears the history. |
| `log execute n` | Runs the n-th most recent history entry again, without storing it a second time. |
| `activities` | Lists the background jobs in pid order, each as `Running`, `Stopped` or unknown. |
| `ping pid signal` | Sends signal number `signal`, taken modulo 32, to a process. |
| `fg pid` | Resumes a background job in the foreground and waits until it stops or ends. |
| `bg pid` | Sends `SIGCONT` to a stopped process so that it continues in the background. |
| `neonate -n seconds` | Prints the highest pid under `/proc` every `seconds` seconds until `x` is pressed or input ends. |
| `iMan command` | Downloads a manual page over HTTP and prints it with all markup removed. |

Ctrl-C kills the foreground process with `SIGKILL`. Ctrl-Z sends it
`SIGTSTP` and moves it to the job list.

## History

Command lines are kept in `store.txt` in the home directory, at most 15 of
them; when the list is full the oldest one is dropped. A line is not stored
if it repeats the last stored line, or if it starts with `log`.

## Aliases

If the home directory has a `.myshrc` file, a line such as

    ll=reveal -l

makes a command whose first word is `ll` expand to `reveal -l`, followed by
the rest of the command. The value is everything after the first `=` that
follows the name on that line.

## Using the pieces from Python

The modules can be used on their own:

- `hopshell.shell.Shell` runs one session; `Shell.run_line(line)` runs a
  command line and `Shell.loop(stream)` reads lines from a file object.
- `hopshell.history.History` is the bounded, file-backed history.
- `hopshell.redirection.parse_redirection` and the `redirected` context
  manager take `<`, `>` and `>>` out of a command and apply them.
- `hopshell.reveal.reveal_lines`, `hopshell.seek.find_matches` and
  `hopshell.proclore.read_process_info` return their results instead of
  printing them.
- `hopshell.jobs.JobTable` keeps background jobs, and `run_external` starts
  programs.

## What it does not do

- It works on Linux only: process information, `activities` and `neonate`
  read `/proc`.
- There is no line editing, tab completion, globbing, environment-variable
  expansion or scripting language; lines are split on `;`, `&`, `|` and
  blanks as described above.
- `fg` does not hand the terminal over to the resumed process.